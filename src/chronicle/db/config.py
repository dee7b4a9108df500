"""Database configuration and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from chronicle.config.settings import get_settings
from chronicle.db.models.base import Base
from chronicle.utils.exceptions import ConfigurationError

_ASYNC_DRIVERS = ("sqlite+aiosqlite", "postgresql+asyncpg", "postgresql+psycopg")


def engine_options(database_url: str, *, environment: str, debug: bool) -> dict[str, Any]:
    """Build create_async_engine keyword arguments for a database URL.

    Raises:
        ConfigurationError: If the URL does not name an async driver
    """
    if not database_url.startswith(_ASYNC_DRIVERS):
        raise ConfigurationError(
            f"DATABASE_URL must use an async driver ({', '.join(_ASYNC_DRIVERS)})"
        )

    settings = get_settings()
    options: dict[str, Any] = {"echo": debug}
    if environment == "test" or database_url.startswith("sqlite"):
        options["poolclass"] = NullPool
    else:
        options["pool_size"] = settings.DATABASE_POOL_SIZE
        options["max_overflow"] = settings.DATABASE_MAX_OVERFLOW
        options["pool_pre_ping"] = True
    return options


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINTs nest on SQLite.

    The sqlite3 driver defers BEGIN until the first write, which turns a
    savepoint opened before any write into the outermost transaction.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


@lru_cache
def get_engine() -> AsyncEngine:
    """Create the process-wide async engine from settings."""
    settings = get_settings()
    engine = create_async_engine(
        settings.DATABASE_URL,
        **engine_options(
            settings.DATABASE_URL,
            environment=settings.ENVIRONMENT,
            debug=settings.DEBUG,
        ),
    )
    if settings.is_sqlite:
        enable_sqlite_savepoints(engine)
    return engine


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the process-wide engine."""
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(create_tables: bool = False) -> None:
    """Verify connectivity and optionally create tables.

    Table creation is meant for local development and tests; deployed
    databases are migrated with alembic.
    """
    async with get_engine().begin() as conn:
        await conn.execute(text("SELECT 1"))
        if create_tables:
            await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections gracefully."""
    await get_engine().dispose()
    get_session_factory.cache_clear()
    get_engine.cache_clear()


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Context manager for obtaining a database session.

    Usage:
        async with get_async_session() as session:
            hooks = ChangeTrackingHooks(session)
            await hooks.on_entity_created(...)

    Yields:
        AsyncSession: A database session that will be automatically closed
    """
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()
