"""
Resolution of pipeline YAML sources.

A request names its YAML either inline (base64 in ``yaml_raw``) or as a
path on a named filesystem, never both. Requests are turned into one of
the two source variants before any content is read.
"""

import base64
import binascii
from dataclasses import dataclass
from typing import TypeAlias

from pipeline_registry.exceptions.domain import (
    InvalidArgumentError,
    SourceConflictError,
    SourceDecodeError,
)
from pipeline_registry.models.auth import CallerIdentity
from pipeline_registry.models.pipeline import CreatePipelineRequest
from pipeline_registry.services.filesystem_service import FilesystemService
from pipeline_registry.utils.logger import logger


@dataclass(frozen=True)
class InlineSource:
    """YAML content sent with the request."""

    content: bytes


@dataclass(frozen=True)
class FilesystemSource:
    """YAML stored at a path on a named filesystem."""

    fs_name: str
    yaml_path: str


PipelineSource: TypeAlias = InlineSource | FilesystemSource


@dataclass(frozen=True)
class ResolvedSource:
    """YAML content together with where it came from."""

    content: bytes
    fs_id: str = ""
    fs_name: str = ""
    yaml_path: str = ""


def parse_source(request: CreatePipelineRequest, default_yaml_path: str) -> PipelineSource:
    """Turn the source fields of a request into a source variant.

    Args:
        request: Create or update request
        default_yaml_path: Path used when only a filesystem name is given

    Returns:
        Inline or filesystem source

    Raises:
        SourceConflictError: If inline YAML is combined with a path or filesystem name
        SourceDecodeError: If inline YAML is not valid base64
        InvalidArgumentError: If neither source is given
    """
    if request.yaml_raw:
        if request.yaml_path:
            logger.error(f"Both yaml_raw and yaml_path [{request.yaml_path}] are set")
            raise SourceConflictError("You can only specify one of yaml_path and yaml_raw")
        if request.fs_name:
            logger.error(f"Both yaml_raw and fs_name [{request.fs_name}] are set")
            raise SourceConflictError("You cannot specify fs_name while you specified yaml_raw")
        try:
            content = base64.b64decode(request.yaml_raw, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.error(f"Decode raw yaml failed: {e}")
            raise SourceDecodeError(str(e)) from e
        return InlineSource(content=content)

    yaml_path = request.yaml_path or default_yaml_path
    if not request.fs_name:
        logger.error(f"No fs_name given for yaml_path [{yaml_path}]")
        raise InvalidArgumentError(
            f"fs_name shall not be empty while yaml_raw is not given (yaml_path [{yaml_path}])"
        )
    return FilesystemSource(fs_name=request.fs_name, yaml_path=yaml_path)


class SourceResolver:
    """Obtains raw YAML bytes from the source a request names."""

    def __init__(self, filesystem_service: FilesystemService, default_yaml_path: str):
        self.filesystem_service = filesystem_service
        self.default_yaml_path = default_yaml_path

    async def resolve(
        self, request: CreatePipelineRequest, caller: CallerIdentity
    ) -> ResolvedSource:
        """Read the YAML a request refers to.

        Every call resolves the filesystem and reads the file again.

        Raises:
            InvalidArgumentError: If the source fields are invalid or the file cannot be read
            EntityNotFoundError: If the filesystem doesn't exist
            AccessDeniedError: If the caller may not use the filesystem
        """
        source = parse_source(request, self.default_yaml_path)
        match source:
            case InlineSource(content=content):
                return ResolvedSource(content=content)
            case FilesystemSource(fs_name=fs_name, yaml_path=yaml_path):
                fs_id = await self.filesystem_service.resolve_filesystem(
                    caller, request.username, fs_name
                )
                content = await self.filesystem_service.read_file(fs_id, yaml_path)
                return ResolvedSource(
                    content=content, fs_id=fs_id, fs_name=fs_name, yaml_path=yaml_path
                )
