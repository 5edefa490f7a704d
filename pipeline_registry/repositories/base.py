"""Base repository with common CRUD operations."""

from collections.abc import Sequence
from typing import Any, Generic, TypeAlias, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select
from sqlmodel import SQLModel, select

from pipeline_registry.exceptions.domain import DatabaseError

FilterValueT: TypeAlias = str | int | float

ModelT = TypeVar("ModelT", bound=SQLModel)


class BaseRepository(Generic[ModelT]):
    """Base repository providing common database operations."""

    def __init__(self, session: AsyncSession, model_class: type[ModelT]):
        """Initialize repository with session and model class.

        Args:
            session: Database session
            model_class: SQLModel class this repository operates on
        """
        self.session = session
        self.model_class = model_class

    async def get_optional(self, id: Any) -> ModelT | None:
        """Get entity by primary key or return None."""
        return await self.session.get(self.model_class, id)

    async def get_by(self, **filters: FilterValueT) -> ModelT | None:
        """Get single entity by filters.

        Args:
            **filters: Field-value pairs to filter by

        Returns:
            Found entity or None
        """
        statement = select(self.model_class)
        for field, value in filters.items():
            if hasattr(self.model_class, field):
                statement = statement.where(getattr(self.model_class, field) == value)

        return await self.first(statement)

    async def count(self, **filters: FilterValueT) -> int:
        """Count entities matching filters.

        Args:
            **filters: Field-value pairs to filter by

        Returns:
            Number of matching entities
        """
        statement = select(func.count()).select_from(self.model_class)

        for field, value in filters.items():
            if hasattr(self.model_class, field):
                statement = statement.where(getattr(self.model_class, field) == value)

        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Count {self.model_class.__name__} failed: {e}") from e
        return result.scalar() or 0

    async def create(self, entity: ModelT) -> ModelT:
        """Create new entity.

        Args:
            entity: Entity to create

        Returns:
            Created entity with refreshed data
        """
        self.session.add(entity)
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Create {self.model_class.__name__} failed: {e}") from e
        await self.session.refresh(entity)
        return entity

    async def first(self, query: Select) -> ModelT | None:
        """Execute a query and return its first entity."""
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Query {self.model_class.__name__} failed: {e}") from e
        return result.scalars().first()

    async def execute_query(self, query: Select) -> Sequence[ModelT]:
        """Execute a custom query.

        Args:
            query: SQLAlchemy Select statement

        Returns:
            Query results
        """
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Query {self.model_class.__name__} failed: {e}") from e
        return result.scalars().all()
