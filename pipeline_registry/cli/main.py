#!/usr/bin/env python3
"""Pipeline registry CLI - management utility for the registry service."""

import argparse
import asyncio
import sys
from pathlib import Path

# Import all models so their tables are registered in the metadata
import pipeline_registry.models  # noqa: F401
from pipeline_registry.settings import settings
from pipeline_registry.utils.db_manager import db_manager
from pipeline_registry.utils.logger import logger


def run_server(host: str | None = None, port: int | None = None) -> None:
    """Run the registry server."""
    import uvicorn

    host = host or settings.host
    port = port or settings.port

    logger.info(f"Starting pipeline registry at http://{host}:{port}")

    uvicorn.run(
        "pipeline_registry.api.app:app",
        host=host,
        port=port,
        reload=settings.debug,
        log_level="info" if settings.debug else "warning",
    )


async def init_database() -> None:
    """Create all database tables."""
    logger.info("Initializing database...")
    await db_manager.create_db_and_tables_async()
    await db_manager.close()
    logger.info("Database initialized successfully")


async def register_filesystem(owner: str, name: str, root: str) -> None:
    """Register a local directory as a user's named filesystem."""
    from pipeline_registry.repositories.filesystem_repository import FileSystemRepository

    root_path = Path(root).resolve()
    if not root_path.is_dir():
        logger.error(f"Filesystem root {root_path} is not a directory")
        sys.exit(1)

    await db_manager.create_db_and_tables_async()
    async with db_manager.get_async_session_context() as session:
        filesystem = await FileSystemRepository(session).register(owner, name, str(root_path))
    await db_manager.close()
    logger.info(f"Registered filesystem [{filesystem.id}] at {root_path}")


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="pplreg", description="Pipeline registry CLI - versioned pipeline definitions"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser("run", help="Run the API server")
    run_parser.add_argument(
        "--host", type=str, default=None, help="Host to bind to (default: 127.0.0.1)"
    )
    run_parser.add_argument(
        "--port", type=int, default=None, help="Port to bind to (default: 8000)"
    )

    # db command
    db_parser = subparsers.add_parser("db", help="Database management")
    db_subparsers = db_parser.add_subparsers(dest="db_command")
    db_subparsers.add_parser("init", help="Initialize database with tables")

    # fs command
    fs_parser = subparsers.add_parser("fs", help="Filesystem management")
    fs_subparsers = fs_parser.add_subparsers(dest="fs_command")
    fs_register = fs_subparsers.add_parser("register", help="Register a filesystem")
    fs_register.add_argument("--owner", type=str, required=True, help="Owning user name")
    fs_register.add_argument("--name", type=str, required=True, help="Filesystem name")
    fs_register.add_argument("--root", type=str, required=True, help="Local root directory")

    args = parser.parse_args()

    if args.command == "run":
        run_server(args.host, args.port)
    elif args.command == "db":
        if args.db_command == "init":
            asyncio.run(init_database())
        else:
            db_parser.print_help()
    elif args.command == "fs":
        if args.fs_command == "register":
            asyncio.run(register_filesystem(args.owner, args.name, args.root))
        else:
            fs_parser.print_help()
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
