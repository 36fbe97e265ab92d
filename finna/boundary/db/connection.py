"""
Database connection management.

One async engine per process. API requests get a session through the
get_async_db dependency; the payment monitor opens its own session from the
same factory.

Dependencies: sqlalchemy, finna.configs
System role: Database connection lifecycle management
"""

from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from finna.configs import get_settings


@lru_cache
def get_async_engine() -> AsyncEngine:
    """
    Create the process-wide async engine.

    SQLite URLs get no pool options since the aiosqlite dialect does not use
    a queue pool.
    """
    db_config = get_settings().database
    options: dict = {"echo": db_config.echo_sql}
    if not db_config.is_sqlite:
        options.update(
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_pre_ping=True,
        )
    return create_async_engine(db_config.async_database_url, **options)


def get_async_session_factory() -> async_sessionmaker:
    """Session factory bound to the process engine; sessions keep objects loaded after commit."""
    return async_sessionmaker(
        bind=get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a request-scoped session.

    The session commits after the route returns and rolls back if it raises,
    so a payment state change and its transaction row are stored together.
    """
    async with get_async_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
