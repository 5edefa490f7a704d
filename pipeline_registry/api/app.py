"""
Main API application module for the pipeline registry.

This module creates and configures the FastAPI application with its
router, exception handlers and database lifecycle.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from pipeline_registry.api.exception_handlers import setup_exception_handlers
from pipeline_registry.api.routers import pipeline
from pipeline_registry.settings import settings
from pipeline_registry.utils.db_manager import db_manager
from pipeline_registry.utils.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:  # noqa: ARG001
    """
    Application lifespan context manager.

    Creates database tables on startup and disposes connections on shutdown.
    """
    await db_manager.create_db_and_tables_async()
    logger.info("Application startup complete")

    try:
        yield
    finally:
        await db_manager.close()
        logger.info("Application shutdown")


def create_app(root_path: str = "/", with_lifespan: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        root_path: The root path for the application
        with_lifespan: Whether to manage database tables and connections

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Pipeline Registry",
        description="Versioned pipeline definitions with owner-scoped access",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan if with_lifespan else None,
        root_path=root_path,
    )

    setup_exception_handlers(app)

    app.include_router(pipeline.router, prefix="/api/pipeline", tags=["Pipelines"])

    return app


# Create default application instance
app = create_app(root_path=settings.root_url)
