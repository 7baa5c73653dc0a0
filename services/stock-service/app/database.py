"""
Database configuration and connection management.

Wraps the async SQLAlchemy engine and session factory so the application
can acquire them at startup and dispose of them at shutdown.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .models import Base

logger = logging.getLogger(__name__)


def get_connect_args(db_url: str) -> dict:
    """
    Get database-specific connection arguments.

    Args:
        db_url: Database connection URL

    Returns:
        Connection arguments dict
    """
    if "sqlite" in db_url:
        return {"check_same_thread": False}
    return {}


def sanitize_url(db_url: str) -> str:
    """Strip credentials from a database URL for logging."""
    if "@" in db_url:
        scheme, _, rest = db_url.partition("://")
        return f"{scheme}://...@{rest.split('@', 1)[1]}"
    return db_url


class Database:
    """Owns the async engine and hands out sessions."""

    def __init__(self, db_url: str, echo: bool = False, **engine_kwargs):
        """
        Create the engine and session factory.

        Args:
            db_url: Async SQLAlchemy URL (e.g. sqlite+aiosqlite, postgresql+asyncpg)
            echo: Log every SQL statement
            engine_kwargs: Extra keyword arguments for create_async_engine
        """
        self.url = db_url
        self.engine = create_async_engine(
            db_url,
            echo=echo,
            pool_pre_ping=True,
            connect_args=get_connect_args(db_url),
            **engine_kwargs,
        )
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )
        logger.info("Using database: %s", sanitize_url(db_url))

    async def init_db(self) -> None:
        """
        Initialize database tables.

        Creates all tables on application startup.
        Uses checkfirst=True to safely handle existing tables.
        """
        logger.info("Initializing database tables...")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        logger.info("Database initialized successfully")

    async def health_check(self) -> bool:
        """
        Check database health.

        Returns:
            True if a trivial query succeeds, False otherwise
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("Database health check failed: %s", e)
            return False

    async def close(self) -> None:
        """Dispose of the engine and its connection pool."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Get database session for dependency injection.

    Yields:
        SQLAlchemy async session bound to the application's database
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        yield session
