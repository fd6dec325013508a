"""
Async database engine with connection pooling.

Features:
- Async SQLAlchemy with asyncpg (production) or aiosqlite (tests, local runs)
- Connection pooling with configurable size
- Health checks
- Session context manager with rollback on error
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from config import Settings
from database.models import Base
from utils.monitoring import get_logger

logger = get_logger(__name__)


class AsyncDatabaseEngine:
    """Async database engine manager with connection pooling."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return self.settings.database_url.startswith("sqlite")

    def create_engine(self) -> AsyncEngine:
        """Create async database engine for the configured URL."""
        settings = self.settings

        if self.is_sqlite:
            # One shared connection so an in-memory database survives across sessions
            engine = create_async_engine(
                settings.database_url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                echo=settings.db_echo,
            )
        else:
            engine = create_async_engine(
                settings.database_url,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_recycle=settings.db_pool_recycle,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_timeout=settings.db_pool_timeout,
                echo=settings.db_echo,
                pool_use_lifo=True,
            )

        self._register_events(engine.sync_engine)
        return engine

    def _register_events(self, engine):
        """Register SQLAlchemy event listeners for pool tracing in debug mode."""
        if not self.settings.debug:
            return

        @event.listens_for(engine, "connect")
        def receive_connect(dbapi_conn, connection_record):
            logger.debug("📊 Database: New connection established")

        @event.listens_for(engine, "checkin")
        def receive_checkin(dbapi_conn, connection_record):
            logger.debug("📊 Database: Connection returned to pool")

    @property
    def engine(self) -> AsyncEngine:
        """Get or create async engine."""
        if self._engine is None:
            self._engine = self.create_engine()
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker:
        """Get or create session factory."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Open a session; uncommitted work is rolled back if the block raises.

        Usage:
            async with db.session() as session:
                result = await session.execute(query)
                await session.commit()
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create every table known to the declarative base."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("✅ Database tables ready")

    async def health_check(self) -> bool:
        """Check database connection health."""
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("❌ Database health check failed", error=e)
            return False

    async def close(self) -> None:
        """Close database engine and cleanup connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("📊 Database: Engine closed and connections cleaned up")
