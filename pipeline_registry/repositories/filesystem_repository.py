"""Repository for filesystem lookups."""

from sqlalchemy.ext.asyncio import AsyncSession

from pipeline_registry.exceptions.domain import FilesystemNotFoundError
from pipeline_registry.models.filesystem import FileSystem, format_filesystem_id
from pipeline_registry.repositories.base import BaseRepository


class FileSystemRepository(BaseRepository[FileSystem]):
    """Repository for FileSystem model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, FileSystem)

    async def get_by_owner(self, owner: str, name: str) -> FileSystem:
        """Get a user's filesystem by name.

        Raises:
            FilesystemNotFoundError: If the user has no such filesystem
        """
        filesystem = await self.get_optional(format_filesystem_id(owner, name))
        if filesystem is None:
            raise FilesystemNotFoundError(name, owner)
        return filesystem

    async def register(self, owner: str, name: str, root_path: str) -> FileSystem:
        """Register a filesystem rooted at a local directory."""
        return await self.create(
            FileSystem(
                id=format_filesystem_id(owner, name),
                name=name,
                owner=owner,
                root_path=root_path,
            )
        )
