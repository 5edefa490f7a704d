"""
Pipeline models for the pipeline registry.

A pipeline is the named, owned aggregate root; every change of its YAML is
stored as a new immutable pipeline version. Both tables carry an
autoincrement ``pk`` row key used only for ordering and pagination.
"""

from datetime import datetime
from typing import Self

from sqlalchemy import Column, Text, UniqueConstraint
from sqlmodel import Field, SQLModel

from .base import format_time, utc_now


def format_pipeline_id(pk: int) -> str:
    """Build the public pipeline id from its row key."""
    return f"ppl-{pk:06d}"


def format_pipeline_version_id(pk: int) -> str:
    """Build the public pipeline version id from its row key."""
    return f"pplver-{pk:06d}"


class Pipeline(SQLModel, table=True):
    """Stored pipeline definition."""

    __tablename__ = "pipeline"
    __table_args__ = (
        UniqueConstraint("owner", "name", name="uq_pipeline_owner_name"),
        {"sqlite_autoincrement": True},
    )

    pk: int | None = Field(default=None, primary_key=True)
    id: str | None = Field(default=None, unique=True, index=True)
    name: str = Field(index=True, max_length=50)
    description: str = ""
    owner: str = Field(index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class PipelineVersion(SQLModel, table=True):
    """Immutable snapshot of a pipeline's YAML and where it was read from."""

    __tablename__ = "pipeline_version"
    __table_args__ = {"sqlite_autoincrement": True}

    pk: int | None = Field(default=None, primary_key=True)
    id: str | None = Field(default=None, unique=True, index=True)
    pipeline_id: str | None = Field(
        default=None, foreign_key="pipeline.id", index=True, nullable=False
    )
    fs_id: str = ""
    fs_name: str = Field(default="", index=True)
    yaml_path: str = ""
    pipeline_yaml: str = Field(sa_column=Column(Text, nullable=False))
    pipeline_md5: str = ""
    owner: str = Field(index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# Requests


class CreatePipelineRequest(SQLModel):
    """Request body for creating or updating a pipeline.

    Exactly one source must be given: ``yaml_raw`` (base64-encoded YAML) or
    ``fs_name`` with an optional ``yaml_path``.

    Args:
        fs_name: Filesystem holding the YAML.
        yaml_path: Path of the YAML inside the filesystem.
        yaml_raw: Base64-encoded YAML content.
        username: Filesystem owner, only honoured for root callers.
        desc: Pipeline description.
    """

    fs_name: str = ""
    yaml_path: str = ""
    yaml_raw: str = ""
    username: str = ""
    desc: str = ""


UpdatePipelineRequest = CreatePipelineRequest


# Responses


class CreatePipelineResponse(SQLModel):
    pipeline_id: str
    pipeline_version_id: str
    name: str


class UpdatePipelineResponse(SQLModel):
    pipeline_id: str
    pipeline_version_id: str


class MarkerInfo(SQLModel):
    """Pagination state returned with every listing."""

    marker: str = ""
    next_marker: str = ""
    truncated: bool = False
    max_keys: int = 0


class PipelineBrief(SQLModel):
    pipeline_id: str
    name: str
    desc: str
    username: str
    create_time: str
    update_time: str

    @classmethod
    def from_model(cls, pipeline: Pipeline) -> Self:
        return cls(
            pipeline_id=pipeline.id or "",
            name=pipeline.name,
            desc=pipeline.description,
            username=pipeline.owner,
            create_time=format_time(pipeline.created_at),
            update_time=format_time(pipeline.updated_at),
        )


class PipelineVersionBrief(SQLModel):
    pipeline_version_id: str
    pipeline_id: str
    fs_name: str
    yaml_path: str
    pipeline_yaml: str
    username: str
    create_time: str
    update_time: str

    @classmethod
    def from_model(cls, version: PipelineVersion) -> Self:
        return cls(
            pipeline_version_id=version.id or "",
            pipeline_id=version.pipeline_id or "",
            fs_name=version.fs_name,
            yaml_path=version.yaml_path,
            pipeline_yaml=version.pipeline_yaml,
            username=version.owner,
            create_time=format_time(version.created_at),
            update_time=format_time(version.updated_at),
        )


class ListPipelineResponse(MarkerInfo):
    pipeline_list: list[PipelineBrief] = []


class PipelineVersions(MarkerInfo):
    pipeline_version_list: list[PipelineVersionBrief] = []


class GetPipelineResponse(SQLModel):
    pipeline: PipelineBrief
    pipeline_versions: PipelineVersions


class GetPipelineVersionResponse(SQLModel):
    pipeline: PipelineBrief
    pipeline_version: PipelineVersionBrief
