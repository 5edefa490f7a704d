"""Service resolving named filesystems and reading files from them."""

from pathlib import Path

import aiofiles

from pipeline_registry.exceptions.domain import AccessDeniedError, SourceReadError
from pipeline_registry.models.auth import CallerIdentity
from pipeline_registry.repositories.filesystem_repository import FileSystemRepository
from pipeline_registry.utils.logger import logger


class FilesystemService:
    """Resolves filesystem names for callers and reads YAML sources."""

    def __init__(self, fs_repo: FileSystemRepository):
        self.fs_repo = fs_repo

    async def resolve_filesystem(
        self, caller: CallerIdentity, requested_owner: str, fs_name: str
    ) -> str:
        """Resolve a filesystem name to its id.

        Only root callers may name a filesystem owned by another user;
        everyone else resolves within their own filesystems.

        Args:
            caller: Calling user
            requested_owner: Owner named in the request, empty for the caller
            fs_name: Filesystem name

        Returns:
            Filesystem id

        Raises:
            AccessDeniedError: If a non-root caller names another owner
            FilesystemNotFoundError: If the filesystem doesn't exist
        """
        owner = caller.user_name
        if requested_owner and requested_owner != caller.user_name:
            if not caller.is_root:
                raise AccessDeniedError(caller.user_name, f"filesystem [{fs_name}]")
            owner = requested_owner

        filesystem = await self.fs_repo.get_by_owner(owner, fs_name)
        return filesystem.id

    async def read_file(self, fs_id: str, path: str) -> bytes:
        """Read a file relative to a filesystem root.

        Args:
            fs_id: Filesystem id
            path: Path inside the filesystem

        Returns:
            File content

        Raises:
            SourceReadError: If the filesystem is gone, the path escapes it or reading fails
        """
        filesystem = await self.fs_repo.get_optional(fs_id)
        if filesystem is None:
            raise SourceReadError(fs_id, path, "filesystem not found")

        root = Path(filesystem.root_path).resolve()
        target = (root / path.lstrip("/")).resolve()
        if not target.is_relative_to(root):
            raise SourceReadError(fs_id, path, "path is outside of the filesystem")

        try:
            async with aiofiles.open(target, "rb") as f:
                content: bytes = await f.read()
        except OSError as e:
            logger.error(f"Read [{target}] from fs [{fs_id}] failed: {e}")
            raise SourceReadError(fs_id, path, str(e)) from e
        return content
