"""Repository for reading schedules that reference pipelines."""

from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from pipeline_registry.models.base import NOT_FINAL_SCHEDULE_STATUSES, ScheduleStatus
from pipeline_registry.models.schedule import Schedule
from pipeline_registry.repositories.base import BaseRepository


class ScheduleRepository(BaseRepository[Schedule]):
    """Repository for Schedule model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Schedule)

    async def list_active(
        self,
        pipeline_ids: Sequence[str] = (),
        version_ids: Sequence[str] = (),
        statuses: Sequence[ScheduleStatus] = NOT_FINAL_SCHEDULE_STATUSES,
    ) -> Sequence[Schedule]:
        """List schedules referencing pipelines or versions in the given statuses.

        Args:
            pipeline_ids: Pipeline ids to match, empty for any
            version_ids: Pipeline version ids to match, empty for any
            statuses: Statuses to match, non-final ones by default

        Returns:
            Matching schedules
        """
        statement = select(Schedule).where(col(Schedule.status).in_(statuses))
        if pipeline_ids:
            statement = statement.where(col(Schedule.pipeline_id).in_(pipeline_ids))
        if version_ids:
            statement = statement.where(col(Schedule.pipeline_version_id).in_(version_ids))
        return await self.execute_query(statement)
