"""
Test suite for BaseCRUD generic database operations.

Tests create, read (by ID and all) and update against the user table in an
in-memory database.

System role: Verification of generic database layer foundation
"""

import uuid

import pytest

from finna.boundary.db.CRUD.base_crud import BaseCRUD
from finna.boundary.db.models.user_model import UserModel


@pytest.fixture
def base_crud() -> BaseCRUD:
    """Provide BaseCRUD instance for testing."""
    return BaseCRUD(UserModel)


class TestBaseCRUD:
    """Test suite for BaseCRUD."""

    @pytest.mark.asyncio
    async def test_create_should_generate_id_and_timestamps(self, base_crud, test_async_db) -> None:
        user = await base_crud.create(test_async_db, username="ville")

        assert isinstance(user.id, uuid.UUID)
        assert user.created_at is not None
        assert user.firstname == ""

    @pytest.mark.asyncio
    async def test_get_by_id(self, base_crud, test_async_db) -> None:
        user = await base_crud.create(test_async_db, username="ville")

        assert (await base_crud.get_by_id(test_async_db, user.id)).username == "ville"
        assert await base_crud.get_by_id(test_async_db, uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_get_all_with_pagination(self, base_crud, test_async_db) -> None:
        for name in ("a", "b", "c"):
            await base_crud.create(test_async_db, username=name)

        assert len(await base_crud.get_all(test_async_db)) == 3
        assert len(await base_crud.get_all(test_async_db, limit=2)) == 2
        assert len(await base_crud.get_all(test_async_db, offset=2)) == 1

    @pytest.mark.asyncio
    async def test_update_instance(self, base_crud, test_async_db) -> None:
        user = await base_crud.create(test_async_db, username="ville")

        await base_crud.update_instance(test_async_db, user, email="ville@example.org")

        reloaded = await base_crud.get_by_id(test_async_db, user.id)
        assert reloaded.email == "ville@example.org"
