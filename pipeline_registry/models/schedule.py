"""Schedule model consulted before pipelines or versions are deleted.

Schedules are written by the scheduler; the registry only reads them.
"""

from sqlmodel import Field, SQLModel

from .base import ScheduleStatus


class Schedule(SQLModel, table=True):
    """A periodic schedule bound to a pipeline version."""

    __tablename__ = "schedule"

    id: str = Field(primary_key=True)
    name: str = ""
    owner: str = Field(index=True)
    pipeline_id: str = Field(index=True)
    pipeline_version_id: str = Field(index=True)
    status: ScheduleStatus = Field(default=ScheduleStatus.running, index=True)
