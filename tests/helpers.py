"""Helper utilities for tests."""

import base64

from sqlalchemy.ext.asyncio import AsyncSession

from pipeline_registry.models.base import ScheduleStatus
from pipeline_registry.models.schedule import Schedule


def workflow_yaml(name: str, extra: str = "") -> str:
    """A small valid workflow named ``name``."""
    return (
        f"name: {name}\n"
        "docker_env: python:3.12\n"
        "entry_points:\n"
        "  preprocess:\n"
        "    command: python preprocess.py\n"
        "  train:\n"
        "    command: python train.py\n"
        "    deps: preprocess\n"
        f"{extra}"
    )


def encode_yaml(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


async def seed_schedule(
    session: AsyncSession,
    schedule_id: str,
    pipeline_id: str,
    version_id: str,
    status: ScheduleStatus = ScheduleStatus.running,
) -> Schedule:
    """Store a schedule directly, as the scheduler would."""
    schedule = Schedule(
        id=schedule_id,
        name=schedule_id,
        owner="alice",
        pipeline_id=pipeline_id,
        pipeline_version_id=version_id,
        status=status,
    )
    session.add(schedule)
    await session.commit()
    await session.refresh(schedule)
    return schedule
