"""
Database connection and session management.
Wraps the async SQLAlchemy engine in an explicitly constructed handle that is
opened at application startup and disposed at shutdown.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import text, DateTime, Uuid, func
from sqlalchemy.pool import StaticPool
from fastapi import Request
from typing import AsyncGenerator, Optional
from datetime import datetime
import logging
import uuid

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all database models.
    Includes common fields: id, created_at, updated_at.
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        """String representation of the model."""
        return f"<{self.__class__.__name__}(id={self.id})>"


class Database:
    """
    Persistence handle owning the engine and the session factory.

    Created once per process (see ``immo_api.main.lifespan``) and passed down
    through ``app.state``; nothing in the package holds a module-level engine.
    """

    def __init__(self, url: str, echo: bool = False, pool_size: int = 5):
        engine_kwargs = {"echo": echo, "pool_pre_ping": True}
        if url.startswith("sqlite") and ":memory:" in url:
            # One shared connection, otherwise every connection sees its own empty database
            engine_kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
        elif not url.startswith("sqlite"):
            engine_kwargs.update(pool_size=pool_size, max_overflow=pool_size * 2, pool_recycle=3600)

        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def test_connection(self) -> bool:
        """
        Test database connectivity.
        Returns True if connection is successful, False otherwise.
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(text("SELECT 1"))
                result.scalar()
                logger.info("Database connection successful")
                return True
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            return False

    async def create_tables(self) -> None:
        """Create all database tables."""
        # Register the mapped classes on Base.metadata
        import immo_api.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")

    async def drop_tables(self) -> None:
        """Drop all database tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            logger.info("Database tables dropped successfully")

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.info("Database connections closed")


def get_database(request: Request) -> Optional[Database]:
    """Return the handle opened by the application lifespan."""
    return getattr(request.app.state, "database", None)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.
    Yields an async database session and ensures it's closed after use.
    """
    database = get_database(request)
    if database is None:
        raise RuntimeError("Database handle is not initialised")

    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
