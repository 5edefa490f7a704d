"""Ownership checks for pipelines and pipeline versions."""

from pipeline_registry.exceptions.domain import AccessDeniedError
from pipeline_registry.models.auth import CallerIdentity
from pipeline_registry.models.pipeline import Pipeline, PipelineVersion
from pipeline_registry.repositories.pipeline_repository import (
    PipelineRepository,
    PipelineVersionRepository,
)
from pipeline_registry.utils.logger import logger


def has_access(caller: CallerIdentity, owner: str) -> bool:
    """Root callers may access everything, other callers only what they own."""
    return caller.is_root or caller.user_name == owner


class PermissionGate:
    """Loads pipelines and versions on behalf of a caller, enforcing ownership."""

    def __init__(
        self, pipeline_repo: PipelineRepository, version_repo: PipelineVersionRepository
    ):
        self.pipeline_repo = pipeline_repo
        self.version_repo = version_repo

    async def check_pipeline(self, caller: CallerIdentity, pipeline_id: str) -> Pipeline:
        """Get a pipeline the caller may access.

        Raises:
            PipelineNotFoundError: If the pipeline doesn't exist
            AccessDeniedError: If the caller doesn't own the pipeline
        """
        pipeline = await self.pipeline_repo.get_by_id(pipeline_id)
        if not has_access(caller, pipeline.owner):
            logger.error(
                f"User [{caller.user_name}] has no access to pipeline [{pipeline_id}] "
                f"of [{pipeline.owner}]"
            )
            raise AccessDeniedError(caller.user_name, f"pipeline [{pipeline_id}]")
        return pipeline

    async def check_pipeline_version(
        self, caller: CallerIdentity, pipeline_id: str, version_id: str
    ) -> tuple[Pipeline, PipelineVersion]:
        """Get a pipeline and one of its versions the caller may access.

        Raises:
            PipelineNotFoundError: If the pipeline doesn't exist
            AccessDeniedError: If the caller doesn't own the pipeline
            PipelineVersionNotFoundError: If the pipeline has no such version
        """
        pipeline = await self.check_pipeline(caller, pipeline_id)
        version = await self.version_repo.get_version(pipeline_id, version_id)
        return pipeline, version
