"""
Generic async data access shared by the user, card and transaction CRUD classes.

Methods flush but never commit; the caller's unit of work (request scope or
monitor run) decides when to commit.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finna.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """Create, fetch and update rows of a single model class."""

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **values: Any) -> ModelT:
        """
        Insert a row and return it with defaults (id, timestamps) populated.

        Args:
            session: Async database session
            **values: Column values
        """
        row = self.model(**values)
        session.add(row)
        await session.flush()
        await session.refresh(row)
        return row

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        result = await session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_all(
        self,
        session: AsyncSession,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[ModelT]:
        """Rows in storage order, optionally paged with limit/offset."""
        stmt = select(self.model).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return (await session.execute(stmt)).scalars().all()

    async def update_instance(self, session: AsyncSession, row: ModelT, **values: Any) -> ModelT:
        """Set attributes on an already loaded row and flush them."""
        for column, value in values.items():
            setattr(row, column, value)
        await session.flush()
        return row
