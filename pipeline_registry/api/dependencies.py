"""
Common dependencies for pipeline registry API endpoints.

This module wires repositories and services per request and resolves the
calling user.
"""

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from pipeline_registry.exceptions.domain import AuthenticationError
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
from pipeline_registry.settings import settings
from pipeline_registry.utils.database import get_async_session
from pipeline_registry.utils.marker import get_marker_codec

SessionDep = Annotated[AsyncSession, Depends(get_async_session)]


async def get_caller(
    x_user_name: Annotated[str | None, Header()] = None,
) -> CallerIdentity:
    """
    Get the calling user from the ``X-User-Name`` header.

    Raises:
        AuthenticationError: If the header is missing or empty
    """
    if not x_user_name:
        raise AuthenticationError("Missing X-User-Name header")
    return CallerIdentity.from_user_name(x_user_name, settings.root_users)


def get_pipeline_service(session: SessionDep) -> PipelineService:
    """Build a pipeline service bound to the request's session."""
    pipeline_repo = PipelineRepository(session)
    version_repo = PipelineVersionRepository(session)
    filesystem_service = FilesystemService(FileSystemRepository(session))
    return PipelineService(
        pipeline_repo=pipeline_repo,
        version_repo=version_repo,
        source_resolver=SourceResolver(filesystem_service, settings.default_yaml_path),
        validator=YamlWorkflowValidator(filesystem_service),
        permission_gate=PermissionGate(pipeline_repo, version_repo),
        schedule_guard=ScheduleGuard(ScheduleRepository(session), version_repo),
        marker_codec=get_marker_codec(),
    )


CallerDep = Annotated[CallerIdentity, Depends(get_caller)]
PipelineServiceDep = Annotated[PipelineService, Depends(get_pipeline_service)]
