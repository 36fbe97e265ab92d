"""
User and library card CRUD operations.

Dependencies: sqlalchemy, finna.boundary.db.models
System role: User and card lookups for patron login
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finna.boundary.db.CRUD.base_crud import BaseCRUD
from finna.boundary.db.models.user_model import UserCardModel, UserModel


class UserCRUD(BaseCRUD[UserModel]):
    """CRUD operations for UserModel."""

    def __init__(self) -> None:
        """Initialize UserCRUD with UserModel."""
        super().__init__(UserModel)

    async def get_by_username(
        self,
        session: AsyncSession,
        username: str,
    ) -> UserModel | None:
        """
        Retrieve user by login name.

        Args:
            session: Async database session
            username: Login name

        Returns:
            UserModel if found, None otherwise
        """
        stmt = select(UserModel).where(UserModel.username == username)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


class UserCardCRUD(BaseCRUD[UserCardModel]):
    """CRUD operations for UserCardModel."""

    def __init__(self) -> None:
        """Initialize UserCardCRUD with UserCardModel."""
        super().__init__(UserCardModel)

    async def get_by_user(
        self,
        session: AsyncSession,
        user_id: UUID,
    ) -> Sequence[UserCardModel]:
        """
        Retrieve all library cards of a user.

        Args:
            session: Async database session
            user_id: Owning user UUID

        Returns:
            Sequence of cards ordered by creation time
        """
        stmt = (
            select(UserCardModel)
            .where(UserCardModel.user_id == user_id)
            .order_by(UserCardModel.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_cat_username(
        self,
        session: AsyncSession,
        user_id: UUID,
        cat_username: str,
    ) -> UserCardModel | None:
        """
        Retrieve a user's card for a specific patron id.

        Args:
            session: Async database session
            user_id: Owning user UUID
            cat_username: Patron id in the ILS

        Returns:
            UserCardModel if found, None otherwise
        """
        stmt = select(UserCardModel).where(
            UserCardModel.user_id == user_id,
            UserCardModel.cat_username == cat_username,
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_by_source(
        self,
        session: AsyncSession,
        user_id: UUID,
        source: str,
    ) -> UserCardModel | None:
        """
        Retrieve a user's first card in an ILS datasource.

        Args:
            session: Async database session
            user_id: Owning user UUID
            source: Datasource prefix of cat_username

        Returns:
            UserCardModel if found, None otherwise
        """
        stmt = (
            select(UserCardModel)
            .where(
                UserCardModel.user_id == user_id,
                UserCardModel.cat_username.startswith(f"{source}."),
            )
            .order_by(UserCardModel.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().first()


user_crud = UserCRUD()
user_card_crud = UserCardCRUD()
