"""
Database connection and session management using SQLAlchemy async.

Only used by the ``postgres`` store backend, where the service talks to the
project database directly instead of going through the Supabase REST API.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from tabletads.common.config import get_settings
from tabletads.common.logger import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class."""

    pass


class DatabaseManager:
    """
    Database connection manager.

    Owns the engine and session factory for the lifetime of the process.
    Sessions are handed out per request and never shared.
    """

    def __init__(self) -> None:
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        """Get the database engine."""
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get the session factory."""
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._session_factory

    @property
    def initialized(self) -> bool:
        """Whether ``init()`` has run."""
        return self._engine is not None

    async def init(self) -> None:
        """Initialize database connection."""
        settings = get_settings()

        self._engine = create_async_engine(
            settings.database.async_url,
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.max_overflow,
            pool_pre_ping=True,
            echo=settings.debug,
        )

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(
            "Database initialized",
            host=settings.database.host,
            database=settings.database.name,
        )

    async def close(self) -> None:
        """Close database connection."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connection closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get a database session context manager.

        Writes are committed by the caller; anything left pending when the
        block raises is rolled back.
        """
        session = self.session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connection health."""
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return False


# Process-wide engine holder; request handlers receive sessions, not this object
db = DatabaseManager()


async def init_db() -> None:
    """Initialize the database."""
    await db.init()


async def close_db() -> None:
    """Close the database connection."""
    await db.close()

