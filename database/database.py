"""
Database engine and session management.

Provides async SQLAlchemy engine, session factory, and database initialization.
"""

import logging
from pathlib import Path
from typing import Optional, AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncEngine,
    AsyncSession
)
from sqlalchemy.engine import make_url

from config.database import get_connection_string
from .models import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Database manager with async support.

    Manages the SQLite connection, session factory, and schema initialization.
    """

    def __init__(self, db_url: Optional[str] = None):
        """
        Initialize database manager.

        Args:
            db_url: Database URL (defaults to the configured DATABASE_PATH)
        """
        if db_url is None:
            db_url = get_connection_string()

        self.db_url = db_url
        logger.info(f"Initializing database: {db_url}")

        self._ensure_parent_dir(db_url)

        # Create async engine with proper configuration
        self._engine: Optional[AsyncEngine] = create_async_engine(
            db_url,
            echo=False,  # Set to True for SQL query logging
            pool_pre_ping=True,  # Verify connections before using
            connect_args={"check_same_thread": False} if "sqlite" in db_url else {},
        )

        # Create session factory
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Prevent lazy loading issues
        )
        self._schema_ready = False

        logger.info("Database manager initialized successfully")

    @staticmethod
    def _ensure_parent_dir(db_url: str) -> None:
        """Create the directory holding a file-backed SQLite database"""
        url = make_url(db_url)
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    @property
    def engine(self) -> AsyncEngine:
        """Get database engine"""
        if self._engine is None:
            raise RuntimeError("Database engine not initialized")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get session factory"""
        if self._session_factory is None:
            raise RuntimeError("Session factory not initialized")
        return self._session_factory

    async def init_db(self) -> None:
        """
        Initialize database schema.

        Creates all tables if they don't exist.
        """
        if self._schema_ready:
            return
        try:
            logger.info("Creating database tables...")
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            self._schema_ready = True
            logger.info("✅ Database tables created successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}", exc_info=True)
            raise

    async def close(self) -> None:
        """
        Gracefully close database connections.

        Should be called on application shutdown.
        """
        if self._engine is not None:
            logger.info("Closing database connections...")
            await self._engine.dispose()
            logger.info("Database connections closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Context manager for database sessions.

        Automatically handles commits and rollbacks.

        Example:
            async with db_manager.session() as session:
                repo = AlertStateRepository(session)
                record = await repo.get_state()

        Yields:
            AsyncSession object
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(f"Database session error: {e}")
                raise

