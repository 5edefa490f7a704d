"""Repositories for pipelines and their versions."""

from collections.abc import Sequence

from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select
from sqlmodel import col, select

from pipeline_registry.exceptions.domain import (
    DatabaseError,
    PipelineAlreadyExistsError,
    PipelineNotFoundError,
    PipelineVersionNotFoundError,
)
from pipeline_registry.models.base import utc_now
from pipeline_registry.models.pipeline import (
    Pipeline,
    PipelineVersion,
    format_pipeline_id,
    format_pipeline_version_id,
)
from pipeline_registry.repositories.base import BaseRepository
from pipeline_registry.utils.logger import logger


def row_key(entity: Pipeline | PipelineVersion) -> int:
    """Row key assigned by the store on flush.

    Raises:
        DatabaseError: If the row has not been written yet
    """
    if entity.pk is None:
        raise DatabaseError(f"{type(entity).__name__} has no row key assigned")
    return entity.pk


def _filter_pipelines(statement: Select, owners: Sequence[str], names: Sequence[str]) -> Select:
    if owners:
        statement = statement.where(col(Pipeline.owner).in_(owners))
    if names:
        statement = statement.where(col(Pipeline.name).in_(names))
    return statement


def _filter_versions(statement: Select, pipeline_id: str, fs_names: Sequence[str]) -> Select:
    statement = statement.where(PipelineVersion.pipeline_id == pipeline_id)
    if fs_names:
        statement = statement.where(col(PipelineVersion.fs_name).in_(fs_names))
    return statement


class PipelineRepository(BaseRepository[Pipeline]):
    """Repository for the pipeline aggregate.

    All writes touching a pipeline and its versions are committed once, so a
    version is never stored without its parent.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session, Pipeline)

    async def get_by_id(self, pipeline_id: str) -> Pipeline:
        """Get pipeline by its public id.

        Raises:
            PipelineNotFoundError: If pipeline doesn't exist
        """
        pipeline = await self.get_by(id=pipeline_id)
        if pipeline is None:
            raise PipelineNotFoundError(pipeline_id)
        return pipeline

    async def get_by_name(self, name: str, owner: str) -> Pipeline | None:
        """Get the pipeline an owner registered under a name."""
        return await self.get_by(name=name, owner=owner)

    async def create_with_version(
        self, pipeline: Pipeline, version: PipelineVersion
    ) -> tuple[Pipeline, PipelineVersion]:
        """Insert a pipeline together with its first version.

        Args:
            pipeline: New pipeline, ``pk`` and ``id`` are assigned here
            version: First version, linked to the pipeline here

        Returns:
            The stored pipeline and version

        Raises:
            PipelineAlreadyExistsError: If the owner already has a pipeline with that name
            DatabaseError: On any other storage failure
        """
        name, owner = pipeline.name, pipeline.owner
        try:
            self.session.add(pipeline)
            await self.session.flush()
            pipeline.id = format_pipeline_id(row_key(pipeline))
            await self.session.flush()

            version.pipeline_id = pipeline.id
            await self._insert_version(version)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Pipeline [{name}] of user [{owner}] rejected by store: {e}")
            raise PipelineAlreadyExistsError(name, owner) from e
        except DatabaseError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Create pipeline [{name}] failed: {e}") from e

        logger.debug(f"Created pipeline [{pipeline.id}] with version [{version.id}]")
        return pipeline, version

    async def add_version(self, pipeline: Pipeline, version: PipelineVersion) -> PipelineVersion:
        """Append a version and save pending pipeline changes in one transaction.

        Args:
            pipeline: Existing pipeline, possibly with an updated description
            version: New version to insert

        Returns:
            The stored version

        Raises:
            DatabaseError: On storage failure
        """
        pipeline_id = pipeline.id
        try:
            pipeline.updated_at = utc_now()
            version.pipeline_id = pipeline_id
            await self._insert_version(version)
            await self.session.commit()
        except DatabaseError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Update pipeline [{pipeline_id}] failed: {e}") from e

        logger.debug(f"Added version [{version.id}] to pipeline [{pipeline_id}]")
        return version

    async def _insert_version(self, version: PipelineVersion) -> None:
        self.session.add(version)
        await self.session.flush()
        version.id = format_pipeline_version_id(row_key(version))
        await self.session.flush()

    async def list_page(
        self,
        after_pk: int | None,
        limit: int,
        owners: Sequence[str] = (),
        names: Sequence[str] = (),
    ) -> Sequence[Pipeline]:
        """List pipelines in ascending row key order.

        Args:
            after_pk: Only return rows with a greater row key, None for the first page
            limit: Maximum number of rows
            owners: Owner filter, empty for all owners
            names: Name filter, empty for all names

        Returns:
            Page of pipelines
        """
        statement = _filter_pipelines(select(Pipeline), owners, names)
        if after_pk is not None:
            statement = statement.where(col(Pipeline.pk) > after_pk)
        statement = statement.order_by(col(Pipeline.pk)).limit(limit)
        return await self.execute_query(statement)

    async def is_last_pk(
        self, pk: int, owners: Sequence[str] = (), names: Sequence[str] = ()
    ) -> bool:
        """Check whether no pipeline matching the filters has a greater row key."""
        statement = _filter_pipelines(select(func.max(Pipeline.pk)), owners, names)
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Get last pipeline row key failed: {e}") from e
        last_pk = result.scalar()
        return last_pk is None or pk >= last_pk

    async def delete_with_versions(self, pipeline_id: str) -> None:
        """Delete a pipeline and all of its versions.

        Raises:
            DatabaseError: On storage failure
        """
        try:
            await self.session.execute(
                delete(PipelineVersion).where(col(PipelineVersion.pipeline_id) == pipeline_id)
            )
            await self.session.execute(delete(Pipeline).where(col(Pipeline.id) == pipeline_id))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Delete pipeline [{pipeline_id}] failed: {e}") from e

        logger.debug(f"Deleted pipeline [{pipeline_id}]")


class PipelineVersionRepository(BaseRepository[PipelineVersion]):
    """Repository for reading and removing single pipeline versions."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, PipelineVersion)

    async def get_version(self, pipeline_id: str, version_id: str) -> PipelineVersion:
        """Get a version of a pipeline.

        Raises:
            PipelineVersionNotFoundError: If the pipeline has no such version
        """
        version = await self.get_by(pipeline_id=pipeline_id, id=version_id)
        if version is None:
            raise PipelineVersionNotFoundError(pipeline_id, version_id)
        return version

    async def count_versions(self, pipeline_id: str) -> int:
        return await self.count(pipeline_id=pipeline_id)

    async def list_page(
        self,
        pipeline_id: str,
        after_pk: int | None,
        limit: int,
        fs_names: Sequence[str] = (),
    ) -> Sequence[PipelineVersion]:
        """List versions of a pipeline in ascending row key order."""
        statement = _filter_versions(select(PipelineVersion), pipeline_id, fs_names)
        if after_pk is not None:
            statement = statement.where(col(PipelineVersion.pk) > after_pk)
        statement = statement.order_by(col(PipelineVersion.pk)).limit(limit)
        return await self.execute_query(statement)

    async def is_last_pk(self, pipeline_id: str, pk: int, fs_names: Sequence[str] = ()) -> bool:
        """Check whether no version matching the filters has a greater row key."""
        statement = _filter_versions(select(func.max(PipelineVersion.pk)), pipeline_id, fs_names)
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Get last version row key of [{pipeline_id}] failed: {e}") from e
        last_pk = result.scalar()
        return last_pk is None or pk >= last_pk

    async def delete_version(self, pipeline_id: str, version_id: str) -> None:
        """Delete one version row.

        Raises:
            DatabaseError: On storage failure
        """
        try:
            await self.session.execute(
                delete(PipelineVersion).where(
                    col(PipelineVersion.pipeline_id) == pipeline_id,
                    col(PipelineVersion.id) == version_id,
                )
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(
                f"Delete pipeline [{pipeline_id}] version [{version_id}] failed: {e}"
            ) from e

        logger.debug(f"Deleted pipeline [{pipeline_id}] version [{version_id}]")
