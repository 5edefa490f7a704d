"""
Base definitions shared by the pipeline registry models.
"""

import enum
from datetime import UTC, datetime

# Format used for create/update times in API responses
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


def format_time(value: datetime | None) -> str:
    """Render a timestamp for API responses, empty when unset."""
    if value is None:
        return ""
    return value.strftime(DATETIME_FORMAT)


class ScheduleStatus(str, enum.Enum):
    """Enumeration of possible schedule status values."""

    running = "running"
    success = "success"
    failed = "failed"
    terminated = "terminated"


# Statuses of schedules that may still start runs
NOT_FINAL_SCHEDULE_STATUSES: tuple[ScheduleStatus, ...] = (ScheduleStatus.running,)
