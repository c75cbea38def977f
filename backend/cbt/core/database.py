"""
Async database access.

The engine is built on first use, not at import, so tests and the seed
command can point DATABASE_URL elsewhere before anything connects.
"""
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from typing import Any, AsyncGenerator, Dict, Optional

from cbt.core.config import settings

Base = declarative_base()

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_database_url() -> str:
    """DATABASE_URL with plain postgresql:// routed to asyncpg"""
    url = settings.DATABASE_URL
    if url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://"):]
    return url


def _engine_options(url: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.DB_ECHO}
    if url.startswith("sqlite"):
        options.update(poolclass=NullPool, connect_args={"check_same_thread": False})
    elif settings.ENVIRONMENT == "production":
        # Exam sittings arrive as bursts of submissions from whole classes
        options.update(pool_size=10, max_overflow=20, pool_recycle=1800, pool_pre_ping=True)
    else:
        options.update(poolclass=NullPool)
    return options


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        url = get_database_url()
        _engine = create_async_engine(url, **_engine_options(url))
    return _engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False
        )
    return _session_factory


def AsyncSessionLocal() -> AsyncSession:
    """A new session outside a request (seed command, scripts)"""
    return get_session_local()()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session. Services commit their own writes; anything still
    pending when the endpoint returns is committed here, and any error rolls
    the session back.
    """
    async with get_session_local()() as session:
        try:
            yield session
            if session.new or session.dirty or session.deleted:
                await session.commit()
        except Exception:
            await session.rollback()
            raise


async def missing_tables() -> list:
    """Names of mapped tables not yet present in the database"""
    import cbt.models  # noqa: F401 - registers models on Base.metadata

    async with get_engine().connect() as conn:
        existing = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))
    return sorted(set(Base.metadata.tables) - existing)


async def init_db() -> None:
    """Create any missing tables; existing ones are left untouched"""
    import cbt.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
