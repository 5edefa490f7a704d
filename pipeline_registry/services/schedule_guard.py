"""Pre-delete checks against schedules that still use a pipeline."""

from pipeline_registry.exceptions.domain import ActiveScheduleError, LastVersionError
from pipeline_registry.repositories.pipeline_repository import PipelineVersionRepository
from pipeline_registry.repositories.schedule_repository import ScheduleRepository
from pipeline_registry.utils.logger import logger


class ScheduleGuard:
    """Blocks deletes of pipelines or versions referenced by running schedules.

    The checks are reads before the delete, not fenced by the delete's
    transaction; a schedule created between check and delete is not seen.
    """

    def __init__(self, schedule_repo: ScheduleRepository, version_repo: PipelineVersionRepository):
        self.schedule_repo = schedule_repo
        self.version_repo = version_repo

    async def check_pipeline_deletable(self, pipeline_id: str) -> None:
        """Raise ActiveScheduleError if a running schedule uses the pipeline."""
        schedules = await self.schedule_repo.list_active(pipeline_ids=[pipeline_id])
        if schedules:
            logger.error(f"Pipeline [{pipeline_id}] is used by {len(schedules)} running schedules")
            raise ActiveScheduleError(f"pipeline [{pipeline_id}]")

    async def check_version_deletable(self, pipeline_id: str, version_id: str) -> None:
        """Check that a single version may be deleted.

        Raises:
            LastVersionError: If it is the only version of the pipeline
            ActiveScheduleError: If a running schedule uses the version
        """
        if await self.version_repo.count_versions(pipeline_id) <= 1:
            logger.error(f"Version [{version_id}] is the last version of pipeline [{pipeline_id}]")
            raise LastVersionError(pipeline_id, version_id)

        schedules = await self.schedule_repo.list_active(
            pipeline_ids=[pipeline_id], version_ids=[version_id]
        )
        if schedules:
            logger.error(
                f"Pipeline [{pipeline_id}] version [{version_id}] is used by "
                f"{len(schedules)} running schedules"
            )
            raise ActiveScheduleError(f"pipeline [{pipeline_id}] version [{version_id}]")
