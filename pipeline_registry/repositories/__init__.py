"""Repository layer for data access."""

from .base import BaseRepository
from .filesystem_repository import FileSystemRepository
from .pipeline_repository import PipelineRepository, PipelineVersionRepository
from .schedule_repository import ScheduleRepository

__all__ = [
    "BaseRepository",
    "FileSystemRepository",
    "PipelineRepository",
    "PipelineVersionRepository",
    "ScheduleRepository",
]
