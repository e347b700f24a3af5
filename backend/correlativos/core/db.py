"""Async database session management helpers."""

from typing import Any, AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from correlativos.core.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    """Pool, isolation and lock-wait options for the backend behind ``url``."""

    backend = make_url(url).get_backend_name()
    lock_timeout = settings.DB_LOCK_TIMEOUT_SEC
    if backend == "sqlite":
        # SQLite serialises writers on the database lock; the busy timeout bounds the wait.
        return {"connect_args": {"timeout": lock_timeout}}

    options: dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "isolation_level": settings.DB_ISOLATION_LEVEL,
    }
    if backend == "mysql":
        options["connect_args"] = {
            "init_command": f"SET SESSION innodb_lock_wait_timeout = {lock_timeout}"
        }
    elif backend == "postgresql":
        options["connect_args"] = {
            "server_settings": {"lock_timeout": f"{lock_timeout * 1000}"}
        }
    return options


def make_engine(url: str) -> AsyncEngine:
    return create_async_engine(url, echo=settings.DEBUG, **_engine_options(url))


engine = make_engine(settings.DATABASE_URL)

SessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an async database session."""

    async with SessionLocal() as session:
        yield session
