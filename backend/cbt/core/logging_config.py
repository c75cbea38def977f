"""
CBT Portal - Logging

The ``cbt`` logger writes JSON lines in production and readable text
elsewhere. Every record carries the request id and the signed-in user id of
the request that produced it. Test codes are credentials until they are
used, so helpers that log them keep only a prefix.
"""

import logging
import sys
import json
import traceback
import uuid
from datetime import datetime
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List, Optional
from contextvars import ContextVar

from cbt.core.config import settings


request_id_var: ContextVar[str] = ContextVar('request_id', default='')
user_id_var: ContextVar[str] = ContextVar('user_id', default='')

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024


def get_request_id() -> str:
    return request_id_var.get() or ''


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def get_user_id() -> str:
    return user_id_var.get() or ''


def set_user_id(user_id: str) -> None:
    user_id_var.set(user_id)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


def mask_code(code: Optional[str]) -> Optional[str]:
    """'AB12CD' -> 'AB****'"""
    if not code:
        return code
    return code[:2] + "*" * max(len(code) - 2, 0)


# LogRecord attributes that are not ``extra`` fields
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "request_id", "user_id"}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with ``extra`` fields lifted to the top level"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": get_request_id() or None,
            "user_id": get_user_id() or None,
        }

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith('_'):
                entry[key] = value

        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Plain text with ``[request_id] [user_id]`` filled in from context"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = get_request_id() or '-'
        record.user_id = get_user_id() or '-'
        return super().format(record)


class CBTLogger(logging.Logger):
    """``logging.Logger`` with helpers for the portal's audit events"""

    def log_auth_event(self, event: str, success: bool, user_email: Optional[str] = None,
                       reason: Optional[str] = None, **kwargs) -> None:
        """Sign-up, sign-in and sign-out; failures are warnings"""
        parts = [f"Auth {event} {'ok' if success else 'failed'}"]
        if user_email:
            parts.append(user_email)
        if reason:
            parts.append(reason)
        self.log(
            logging.INFO if success else logging.WARNING,
            " - ".join(parts),
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_test_event(self, event: str, code: Optional[str] = None, **kwargs) -> None:
        """
        Test-code lifecycle: batch generation and activation, papers served,
        submissions and deactivation. ``code`` is masked.
        """
        masked = mask_code(code)
        self.info(
            f"Test {event}" + (f" [{masked}]" if masked else ""),
            extra={"event_type": "test", "test_event": event, "test_code": masked, **kwargs}
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None, **kwargs) -> None:
        self.error(
            f"Error in {context}: {type(error).__name__}: {error}",
            exc_info=True,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
                **kwargs
            }
        )

    def log_performance(self, operation: str, duration_ms: float,
                        threshold_ms: float = 1000, **kwargs) -> None:
        """Warn when ``operation`` took longer than ``threshold_ms``, debug otherwise"""
        slow = duration_ms > threshold_ms
        self.log(
            logging.WARNING if slow else logging.DEBUG,
            f"Slow: {operation} took {duration_ms:.0f}ms" if slow else f"{operation} took {duration_ms:.0f}ms",
            extra={
                "event_type": "performance",
                "operation": operation,
                "duration_ms": round(duration_ms, 2),
                "threshold_ms": threshold_ms,
                **kwargs
            }
        )


def _build_handlers(is_production: bool) -> List[logging.Handler]:
    if is_production:
        console_formatter = file_formatter = JSONFormatter()
    else:
        console_formatter = ContextualFormatter("%(levelname)-8s | %(message)s")
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s] | "
            "%(name)s:%(funcName)s:%(lineno)d | %(message)s"
        )

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(console_formatter)
    handlers: List[logging.Handler] = [console]

    # An empty LOG_FILE turns the file handler off (tests do this)
    if settings.LOG_FILE:
        path = Path(settings.LOG_FILE)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=10 if is_production else 5)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)

    return handlers


def setup_logging() -> CBTLogger:
    """Configure the ``cbt`` logger tree from settings"""
    logging.setLoggerClass(CBTLogger)

    logger = logging.getLogger("cbt")
    logger.__class__ = CBTLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.propagate = False

    is_production = settings.ENVIRONMENT == "production"
    logger.handlers.clear()
    for handler in _build_handlers(is_production):
        logger.addHandler(handler)

    for noisy in ("httpx", "uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug(f"Logging ready ({'json' if is_production else 'text'}, level {settings.LOG_LEVEL})")
    return logger


logger: CBTLogger = setup_logging()


__all__ = [
    'logger',
    'setup_logging',
    'get_request_id',
    'set_request_id',
    'get_user_id',
    'set_user_id',
    'generate_request_id',
    'mask_code',
    'CBTLogger',
    'JSONFormatter',
    'ContextualFormatter',
]
