"""Global fixtures for pipeline registry tests, real in-memory SQLite and no mocks."""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# Import all models to ensure metadata is populated
from pipeline_registry.models import *  # noqa: F403
from pipeline_registry.models.auth import CallerIdentity
from pipeline_registry.repositories import (
    FileSystemRepository,
    PipelineRepository,
    PipelineVersionRepository,
    ScheduleRepository,
)
from pipeline_registry.services import (
    FilesystemService,
    PermissionGate,
    PipelineService,
    ScheduleGuard,
    SourceResolver,
    YamlWorkflowValidator,
)
from pipeline_registry.utils.db_manager import enable_sqlite_foreign_keys
from pipeline_registry.utils.marker import MarkerCodec

TEST_MARKER_SECRET = "test-marker-secret"


@pytest.fixture
def alice() -> CallerIdentity:
    return CallerIdentity(user_name="alice")


@pytest.fixture
def bob() -> CallerIdentity:
    return CallerIdentity(user_name="bob")


@pytest.fixture
def root() -> CallerIdentity:
    return CallerIdentity(user_name="root", is_root=True)


@pytest.fixture
def marker_codec() -> MarkerCodec:
    return MarkerCodec(TEST_MARKER_SECRET)


@pytest.fixture
def capture_logs() -> Generator[list[str]]:
    """Capture loguru ERROR (and above) log messages during a test.

    Yields a list that is populated with ``record["message"]`` strings as
    the test runs. The loguru sink is removed automatically after the test.
    """
    messages: list[str] = []

    def _sink(message: Any) -> None:
        messages.append(message.record["message"])

    sink_id = logger.add(_sink, level="ERROR", format="{message}")
    yield messages
    logger.remove(sink_id)


@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def fs_root(test_session, tmp_path: Path) -> Path:
    """Filesystem ``data`` of alice, rooted at a temporary directory."""
    await FileSystemRepository(test_session).register("alice", "data", str(tmp_path))
    return tmp_path


@pytest.fixture
def filesystem_service(test_session) -> FilesystemService:
    return FilesystemService(FileSystemRepository(test_session))


@pytest.fixture
def pipeline_service(test_session, filesystem_service, marker_codec) -> PipelineService:
    pipeline_repo = PipelineRepository(test_session)
    version_repo = PipelineVersionRepository(test_session)
    return PipelineService(
        pipeline_repo=pipeline_repo,
        version_repo=version_repo,
        source_resolver=SourceResolver(filesystem_service, "./run.yaml"),
        validator=YamlWorkflowValidator(filesystem_service),
        permission_gate=PermissionGate(pipeline_repo, version_repo),
        schedule_guard=ScheduleGuard(ScheduleRepository(test_session), version_repo),
        marker_codec=marker_codec,
        max_desc_length=1024,
        default_max_keys=50,
        max_keys_limit=1000,
    )


@pytest_asyncio.fixture
async def client(test_session) -> AsyncGenerator[AsyncClient, None]:
    """Create test API client sharing the test session."""
    from pipeline_registry.api.app import create_app
    from pipeline_registry.utils.database import get_async_session

    app = create_app(with_lifespan=False)

    async def override_get_session():
        yield test_session

    app.dependency_overrides[get_async_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
