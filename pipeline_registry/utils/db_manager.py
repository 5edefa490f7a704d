"""
Database manager for the pipeline registry.

The async engine and session factory are created on first use from
:attr:`Settings.database_url`, so importing this module never opens a
connection.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from pipeline_registry.settings import DatabaseDriver, Settings, settings
from pipeline_registry.utils.logger import logger


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on foreign key enforcement for every SQLite connection of an engine."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):  # type: ignore[no-untyped-def]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class DatabaseManager:
    """Owns the async engine and hands out sessions."""

    def __init__(self, config: Settings) -> None:
        self.config = config
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def _create_engine(self) -> AsyncEngine:
        url = self.config.database_url
        if self.config.database_driver == DatabaseDriver.SQLITE:
            engine = create_async_engine(
                url, connect_args={"check_same_thread": False}, echo=self.config.debug
            )
            enable_sqlite_foreign_keys(engine)
        else:
            engine = create_async_engine(
                url, echo=self.config.debug, pool_size=20, max_overflow=0, pool_pre_ping=True
            )

        logger.info(f"Database engine created for {self.config.database_driver.value}")
        return engine

    @property
    def engine(self) -> AsyncEngine:
        """Get or create the async engine."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create the session factory.

        Sessions keep loaded attributes after commit, so services can read
        ids and timestamps of rows they just wrote.
        """
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._session_factory

    async def create_db_and_tables_async(self) -> None:
        """Create all registered tables that don't exist yet."""
        logger.info("Creating database tables...")
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Database tables created")

    @asynccontextmanager
    async def get_async_session_context(self) -> AsyncGenerator[AsyncSession]:
        """
        Open a session, committing on success and rolling back on database errors.

        Usage:
            async with db_manager.get_async_session_context() as session:
                await FileSystemRepository(session).register("alice", "data", "/srv/data")
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                logger.error(f"Database error: {e}")
                await session.rollback()
                raise

    async def get_async_session(self) -> AsyncGenerator[AsyncSession]:
        """Yield a session for the duration of one request."""
        async with self.get_async_session_context() as session:
            yield session

    async def close(self) -> None:
        """Dispose the engine and forget the session factory."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")

    def __repr__(self) -> str:
        return (
            f"<DatabaseManager(driver={self.config.database_driver.value}, "
            f"connected={self._engine is not None})>"
        )


db_manager = DatabaseManager(settings)
