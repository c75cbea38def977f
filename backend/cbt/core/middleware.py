"""
CBT Portal - HTTP Middleware

Access logging with request ids, security headers and a body size cap for
question uploads. Test codes are single-use credentials, so they are masked
before a path reaches the logs.
"""

import re
import time
from typing import Callable, Set
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from starlette.types import ASGIApp

from cbt.core.logging_config import (
    logger,
    set_request_id,
    set_user_id,
    generate_request_id,
    mask_code,
)


QUIET_PATHS: Set[str] = {"/", "/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico"}

SLOW_REQUEST_MS = 1000

# /test-codes/<code>, /test-codes/validate/<code>; literal sub-routes are left alone
_CODE_IN_PATH = re.compile(r"(/test-codes/(?:validate/)?)(?!deactivate-all\b|validate\b)([A-Za-z0-9]{4,16})\b")


def mask_test_codes(path: str) -> str:
    """'/api/test-codes/AB12CD/paper' -> '/api/test-codes/AB****/paper'"""
    return _CODE_IN_PATH.sub(lambda m: m.group(1) + mask_code(m.group(2)), path)


def _level_for(status_code: int) -> str:
    if status_code >= 500:
        return "error"
    if status_code >= 400:
        return "warning"
    return "info"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per request, keyed by X-Request-ID.

    The id is taken from the incoming header when the client sends one and is
    echoed back together with X-Response-Time.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)

        quiet = request.url.path in QUIET_PATHS
        path = mask_test_codes(request.url.path)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - started) * 1000
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

            if not quiet:
                getattr(logger, _level_for(response.status_code))(
                    f"{request.method} {path} {response.status_code} ({duration_ms:.0f}ms)",
                    extra={
                        "event_type": "http_request",
                        "http_method": request.method,
                        "http_path": path,
                        "http_status": response.status_code,
                        "duration_ms": round(duration_ms, 2),
                        "client_ip": request.client.host if request.client else "unknown",
                    }
                )
                if duration_ms > SLOW_REQUEST_MS:
                    logger.log_performance(f"{request.method} {path}", duration_ms, threshold_ms=SLOW_REQUEST_MS)
            return response

        except Exception as exc:
            logger.error(
                f"{request.method} {path} failed: {type(exc).__name__}",
                exc_info=True,
                extra={"event_type": "http_request_error", "http_method": request.method, "http_path": path}
            )
            raise

        finally:
            set_request_id("")
            set_user_id("")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """The portal is never framed and its JSON is never sniffed as HTML"""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Cache-Control": "no-store",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in self.HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies over ``max_size`` bytes before they are read (CSV imports are the large ones)"""

    def __init__(self, app: ASGIApp, max_size: int):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_size:
            logger.warning(
                f"Rejected {declared}-byte body on {request.url.path}",
                extra={"event_type": "request_too_large", "max_size": self.max_size}
            )
            return JSONResponse(
                status_code=413,
                content={"error": f"Request body too large. Maximum size is {self.max_size // (1024 * 1024)}MB"}
            )
        return await call_next(request)


__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "RequestSizeLimitMiddleware",
    "mask_test_codes",
]
