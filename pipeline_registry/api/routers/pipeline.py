"""Pipeline API router.

Thin HTTP layer over :class:`PipelineService`; all rules live in the service.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from pipeline_registry.api.dependencies import CallerDep, PipelineServiceDep
from pipeline_registry.models.pipeline import (
    CreatePipelineRequest,
    CreatePipelineResponse,
    GetPipelineResponse,
    GetPipelineVersionResponse,
    ListPipelineResponse,
    UpdatePipelineRequest,
    UpdatePipelineResponse,
)

router = APIRouter()


@router.post("", response_model=CreatePipelineResponse, status_code=status.HTTP_201_CREATED)
async def create_pipeline(
    request: CreatePipelineRequest,
    caller: CallerDep,
    service: PipelineServiceDep,
) -> CreatePipelineResponse:
    """Create a pipeline from inline or filesystem YAML."""
    return await service.create_pipeline(caller, request)


@router.put("/{pipeline_id}", response_model=UpdatePipelineResponse)
async def update_pipeline(
    pipeline_id: str,
    request: UpdatePipelineRequest,
    caller: CallerDep,
    service: PipelineServiceDep,
) -> UpdatePipelineResponse:
    """Add a new version to a pipeline."""
    return await service.update_pipeline(caller, pipeline_id, request)


@router.get("", response_model=ListPipelineResponse)
async def list_pipelines(
    caller: CallerDep,
    service: PipelineServiceDep,
    marker: str = "",
    max_keys: Annotated[int | None, Query(alias="maxKeys")] = None,
    user_filter: Annotated[list[str] | None, Query(alias="userFilter")] = None,
    name_filter: Annotated[list[str] | None, Query(alias="nameFilter")] = None,
) -> ListPipelineResponse:
    """List pipelines visible to the caller.

    Filters may be repeated or given comma-separated.
    """
    return await service.list_pipelines(
        caller,
        marker=marker,
        max_keys=max_keys,
        user_filter=_split(user_filter),
        name_filter=_split(name_filter),
    )


@router.get("/{pipeline_id}", response_model=GetPipelineResponse)
async def get_pipeline(
    pipeline_id: str,
    caller: CallerDep,
    service: PipelineServiceDep,
    marker: str = "",
    max_keys: Annotated[int | None, Query(alias="maxKeys")] = None,
    fs_filter: Annotated[list[str] | None, Query(alias="fsFilter")] = None,
) -> GetPipelineResponse:
    """Get a pipeline with a page of its versions."""
    return await service.get_pipeline(
        caller,
        pipeline_id,
        marker=marker,
        max_keys=max_keys,
        fs_filter=_split(fs_filter),
    )


@router.get("/{pipeline_id}/{version_id}", response_model=GetPipelineVersionResponse)
async def get_pipeline_version(
    pipeline_id: str,
    version_id: str,
    caller: CallerDep,
    service: PipelineServiceDep,
) -> GetPipelineVersionResponse:
    """Get one version of a pipeline."""
    return await service.get_pipeline_version(caller, pipeline_id, version_id)


@router.delete("/{pipeline_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pipeline(
    pipeline_id: str,
    caller: CallerDep,
    service: PipelineServiceDep,
) -> None:
    """Delete a pipeline and all of its versions."""
    await service.delete_pipeline(caller, pipeline_id)


@router.delete("/{pipeline_id}/{version_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pipeline_version(
    pipeline_id: str,
    version_id: str,
    caller: CallerDep,
    service: PipelineServiceDep,
) -> None:
    """Delete a single version of a pipeline."""
    await service.delete_pipeline_version(caller, pipeline_id, version_id)


def _split(values: list[str] | None) -> list[str]:
    if not values:
        return []
    return [item.strip() for value in values for item in value.split(",") if item.strip()]
