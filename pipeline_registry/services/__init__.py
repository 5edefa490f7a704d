"""Service layer for the pipeline registry."""

from .filesystem_service import FilesystemService
from .permission import PermissionGate, has_access
from .pipeline_service import PipelineService
from .schedule_guard import ScheduleGuard
from .source_resolver import (
    FilesystemSource,
    InlineSource,
    PipelineSource,
    ResolvedSource,
    SourceResolver,
    parse_source,
)
from .workflow_validator import WorkflowValidator, YamlWorkflowValidator

__all__ = [
    "FilesystemService",
    "FilesystemSource",
    "InlineSource",
    "PermissionGate",
    "PipelineService",
    "PipelineSource",
    "ResolvedSource",
    "ScheduleGuard",
    "SourceResolver",
    "WorkflowValidator",
    "YamlWorkflowValidator",
    "has_access",
    "parse_source",
]
