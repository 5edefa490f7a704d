"""
Pipeline registry data models.

This package contains the SQLModel-based models that define the database schema
and the request/response structures of the registry.
"""

from .auth import CallerIdentity
from .base import NOT_FINAL_SCHEDULE_STATUSES, ScheduleStatus, format_time, utc_now
from .filesystem import FileSystem, format_filesystem_id
from .pipeline import (
    CreatePipelineRequest,
    CreatePipelineResponse,
    GetPipelineResponse,
    GetPipelineVersionResponse,
    ListPipelineResponse,
    MarkerInfo,
    Pipeline,
    PipelineBrief,
    PipelineVersion,
    PipelineVersionBrief,
    PipelineVersions,
    UpdatePipelineRequest,
    UpdatePipelineResponse,
    format_pipeline_id,
    format_pipeline_version_id,
)
from .schedule import Schedule

__all__ = [
    "NOT_FINAL_SCHEDULE_STATUSES",
    # Auth
    "CallerIdentity",
    # Pipeline
    "CreatePipelineRequest",
    "CreatePipelineResponse",
    # Filesystem
    "FileSystem",
    "GetPipelineResponse",
    "GetPipelineVersionResponse",
    "ListPipelineResponse",
    "MarkerInfo",
    "Pipeline",
    "PipelineBrief",
    "PipelineVersion",
    "PipelineVersionBrief",
    "PipelineVersions",
    # Schedule
    "Schedule",
    "ScheduleStatus",
    "UpdatePipelineRequest",
    "UpdatePipelineResponse",
    "format_filesystem_id",
    "format_pipeline_id",
    "format_pipeline_version_id",
    "format_time",
    "utc_now",
]
