"""Filesystem model read when resolving pipeline YAML sources."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from .base import utc_now


def format_filesystem_id(owner: str, name: str) -> str:
    """Build the identifier of a user's named filesystem."""
    return f"fs-{owner}-{name}"


class FileSystem(SQLModel, table=True):
    """A named storage location owned by a user.

    Args:
        id: ``fs-<owner>-<name>`` identifier.
        name: Filesystem name, unique per owner.
        owner: Owning user name.
        root_path: Local directory holding the filesystem content.
    """

    __tablename__ = "filesystem"

    id: str = Field(primary_key=True)
    name: str = Field(index=True, min_length=1, max_length=100)
    owner: str = Field(index=True)
    root_path: str
    created_at: datetime = Field(default_factory=utc_now)
