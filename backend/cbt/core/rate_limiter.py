"""
Rate Limiting for the CBT Portal API
====================================
Implements rate limiting using slowapi. Storage defaults to in-process memory;
point RATE_LIMIT_STORAGE_URI at redis:// when running several workers.

Sign-in and sign-up carry their own stricter limit (AUTH_RATE_LIMIT) to slow
down password guessing against student accounts.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from cbt.core.config import settings
from cbt.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """Rate limit key: the client IP address"""
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Return a JSON 429 with a Retry-After hint"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}",
        extra={"event_type": "rate_limit", "http_path": request.url.path}
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests. Please slow down.",
            "detail": str(exc.detail),
        },
        headers={"Retry-After": "60"}
    )


def auth_rate_limit():
    """Rate limit for sign-in and sign-up"""
    return limiter.limit(settings.AUTH_RATE_LIMIT, key_func=get_client_identifier)
