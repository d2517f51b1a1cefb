"""Async engine, session factory and the request-scoped session dependency."""

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from dropship_ai.config import get_settings


class Base(DeclarativeBase):
    """Declarative base for niches, products, users and rate limit counters."""

    pass


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for PostgreSQL or SQLite.

    File-backed SQLite databases are switched to WAL so the rate limit
    counter writes do not block catalog reads.
    """
    is_sqlite = database_url.startswith("sqlite")

    connect_args = {}
    if is_sqlite:
        connect_args = {
            "timeout": 30,  # Wait up to 30 seconds for lock
            "check_same_thread": False,
        }

    engine = create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )

    if is_sqlite and ":memory:" not in database_url:

        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=30000")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

    return engine


settings = get_settings()

engine = create_engine_for(settings.database_url, echo=settings.debug)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def create_all(bind: AsyncEngine | None = None) -> list[str]:
    """Create every table on the given engine (default: the app engine).

    Returns:
        Names of the tables in the metadata
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return sorted(Base.metadata.tables)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Session per request; committed on success, rolled back on error."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
