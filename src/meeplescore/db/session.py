# src/meeplescore/db/session.py

"""Database session management."""
import logging
import os
from typing import AsyncContextManager, AsyncGenerator, Callable

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

logger = logging.getLogger(__name__)

# Database URL from environment variable with SQLite fallback for development
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./meeplescore.db")

# Anything that can be called to open a session usable as `async with`
SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]


def _create_engine():
    """Create the async engine with appropriate configuration.

    SQLite doesn't support connection pooling, so we only configure
    pool settings for other databases like PostgreSQL.
    """
    url = DATABASE_URL

    # SQLite doesn't support connection pooling
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=os.getenv("DB_ECHO", "false").lower() == "true",
        )

    return create_async_engine(
        url,
        pool_size=int(os.getenv("DB_POOL_SIZE", "20")),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "3600")),
        echo=os.getenv("DB_ECHO", "false").lower() == "true",
    )


engine = _create_engine()

# autocommit=False: Transactions are committed manually.
# autoflush=False: Changes are not flushed until explicitly committed.
# expire_on_commit=False: Objects remain accessible after commit.
AsyncSessionLocal = async_sessionmaker(
    bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides an async database session.

    Automatically handles rollback on exceptions and ensures
    the session is properly closed.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Database session error, rolling back: {e}")
            await session.rollback()
            raise


def get_session_factory() -> SessionFactory:
    """FastAPI dependency returning the factory used by background tasks.

    Background work runs after the request session has been closed, so it
    must open a session of its own.
    """
    return AsyncSessionLocal
