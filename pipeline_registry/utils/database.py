"""
Database session dependency for the pipeline registry API.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from pipeline_registry.utils.db_manager import db_manager


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session as a FastAPI dependency.

    Yields:
        AsyncSession: SQLModel async session
    """
    async for session in db_manager.get_async_session():
        yield session
