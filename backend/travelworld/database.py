"""Async SQLAlchemy engine, session factory, and declarative base.

The engine is a process-wide resource created lazily on first use. Parallel
first requests share a single initialisation behind an ``asyncio.Lock``; the
application lifespan disposes it on shutdown.
"""

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from travelworld.config import settings

logger = logging.getLogger(__name__)


class Database:
    """Lazily initialised, pooled connection to the document store."""

    def __init__(self, url: str) -> None:
        self._url = url
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database engine has not been initialised; await connect() first")
        return self._engine

    async def connect(self) -> async_sessionmaker[AsyncSession]:
        """Create the engine on first call and return the session factory."""
        if self._session_factory is not None:
            return self._session_factory

        async with self._lock:
            if self._session_factory is None:
                self._engine = create_async_engine(
                    self._url,
                    echo=settings.debug,
                    pool_pre_ping=True,
                    pool_size=settings.db_pool_size,
                    max_overflow=settings.db_max_overflow,
                    pool_timeout=settings.db_connect_timeout,
                    connect_args={
                        "timeout": settings.db_connect_timeout,
                        "command_timeout": settings.db_command_timeout,
                    },
                )
                self._session_factory = async_sessionmaker(
                    self._engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                )
                logger.info("Database engine initialised")
        return self._session_factory

    async def dispose(self) -> None:
        """Close pooled connections. Safe to call when never connected."""
        async with self._lock:
            if self._engine is not None:
                await self._engine.dispose()
                logger.info("Database engine disposed")
            self._engine = None
            self._session_factory = None


database = Database(settings.async_database_url)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns."""

    # clock_timestamp() keeps rows written in one transaction in insertion order
    created_at: Mapped[datetime] = mapped_column(server_default=func.clock_timestamp())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )


class UUIDPrimaryKeyMixin:
    """Mixin that adds a UUID primary key column."""

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield an async database session for FastAPI dependency injection.

    Usage::

        @router.get("/items")
        async def get_items(session: AsyncSession = Depends(get_db)):
            ...
    """
    session_factory = await database.connect()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
