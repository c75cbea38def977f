from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from contextlib import asynccontextmanager

from cbt.core.config import settings
from cbt.core.database import get_db, missing_tables, init_db, close_db
from cbt.core.exceptions import CBTError
from cbt.core.logging_config import logger
from cbt.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
    mask_test_codes,
)
from cbt.core.rate_limiter import limiter, rate_limit_exceeded_handler
from cbt.api.router import api_router
from slowapi.errors import RateLimitExceeded
import cbt.models  # noqa: F401 - registers models on Base.metadata

APP_VERSION = "1.0.0"

PLACEHOLDER_SECRETS = {"", "CHANGE_ME"}


def check_settings():
    """
    Return (errors, warnings) for the running configuration.

    Errors stop the server from starting. Warnings are production-only
    hazards that still let it run.
    """
    errors = []
    warnings = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")
    for name in ("SECRET_KEY", "JWT_SECRET_KEY"):
        if getattr(settings, name) in PLACEHOLDER_SECRETS:
            errors.append(f"{name} is not set or still the placeholder")
    if settings.TEST_CODE_LENGTH < 4:
        errors.append("TEST_CODE_LENGTH below 4 makes codes guessable")
    if settings.MAX_SECURITY_VIOLATIONS < 1:
        errors.append("MAX_SECURITY_VIOLATIONS must be at least 1")

    if settings.ENVIRONMENT == "production":
        if not settings.SESSION_COOKIE_SECURE:
            warnings.append("SESSION_COOKIE_SECURE is off, session cookies travel over plain HTTP")
        if settings.DEFAULT_ADMIN_PASSWORD == "admin123":
            warnings.append("DEFAULT_ADMIN_PASSWORD is the shipped default, change it after seeding")
        if settings.DEBUG:
            warnings.append("DEBUG is on, 500 responses will include exception text")

    return errors, warnings


async def validate_critical_config():
    """Fail fast on missing configuration"""
    errors, warnings = check_settings()

    for warn in warnings:
        logger.warning(f"[Startup] {warn}")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] {err}")
        raise RuntimeError(f"Invalid configuration: {'; '.join(errors)}")

    logger.info("[Startup] Configuration validated")
    return True


async def ensure_database_ready():
    """Create tables on first start so signup works against an empty database"""
    try:
        missing = await missing_tables()
        if missing:
            logger.warning(f"[Startup] Creating missing tables: {', '.join(missing)}")
            await init_db()
        return True

    except SQLAlchemyError as e:
        logger.error(f"[Startup] Database unavailable: {e}")
        return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} {APP_VERSION} ({settings.ENVIRONMENT})")

    await validate_critical_config()
    if not await ensure_database_ready():
        logger.warning("[Startup] Continuing without a database; requests will fail until it is reachable")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Computer-based testing for schools: question bank, single-use test codes, grading and reports",
    version=APP_VERSION,
    lifespan=lifespan,
    redirect_slashes=False
)

# Rate limiter state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Middleware (last added runs first)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE_MB * 1024 * 1024)

# Credentials are allowed so the session cookie travels with CORS requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time", "Content-Disposition"],
)


# Exception handlers
@app.exception_handler(CBTError)
async def cbt_error_handler(request: Request, exc: CBTError):
    if exc.status_code >= 500:
        logger.log_error_with_context(exc, context=mask_test_codes(request.url.path))
    else:
        logger.info(f"{request.method} {mask_test_codes(request.url.path)} -> {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={
            "error": message.replace("Value error, ", ""),
            "details": jsonable_encoder(errors, custom_encoder={Exception: str})
        }
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.log_error_with_context(exc, context=f"{request.method} {mask_test_codes(request.url.path)}")
    return JSONResponse(
        status_code=500,
        content={"error": str(exc) if settings.DEBUG else "Internal server error"}
    )


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness plus a database round trip; 503 when the database is down"""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check database failure: {e}")
        return JSONResponse(status_code=503, content={"status": "unhealthy", "database": "unreachable"})

    return {
        "status": "healthy",
        "database": "ok",
        "app_name": settings.APP_NAME,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/", tags=["Root"])
async def root():
    return {"message": f"{settings.APP_NAME} API", "api": settings.API_PREFIX, "docs": "/docs"}


app.include_router(api_router, prefix=settings.API_PREFIX)


def run():
    """Entry point for ``cbt-server``"""
    import uvicorn
    uvicorn.run("cbt.main:app", host=settings.SERVER_HOST, port=settings.SERVER_PORT, reload=settings.DEBUG)


if __name__ == "__main__":
    run()
