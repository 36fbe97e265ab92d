"""
Test suite for API dependency functions.

System role: Verification of user resolution, patron login and loader wiring
"""

import uuid
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from finna.api.deps.dependencies import (
    ServiceCache,
    get_channel_loader,
    get_current_user,
    get_patron,
    get_service_cache,
)
from finna.core.channels.loader import ChannelLoader


class TestGetCurrentUser:
    """Test suite for get_current_user()."""

    @pytest.mark.asyncio
    async def test_known_user(self, test_async_db, user_with_card) -> None:
        user = await get_current_user(str(user_with_card.id), test_async_db)

        assert user.username == "maija"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", [None, "", "not-a-uuid", str(uuid.uuid4())])
    async def test_rejected_header(self, test_async_db, header) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(header, test_async_db)

        assert exc_info.value.status_code == 401


class TestGetPatron:
    """Test suite for get_patron()."""

    @pytest.mark.asyncio
    async def test_login_with_card(self, test_async_db, user_with_card, demo_ils) -> None:
        patron = await get_patron("lib", user_with_card, test_async_db, demo_ils)

        assert patron["cat_username"] == "lib.1234"

    @pytest.mark.asyncio
    async def test_no_card_for_source(self, test_async_db, user_with_card, demo_ils) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_patron("other", user_with_card, test_async_db, demo_ils)

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_rejected_credentials(self, test_async_db, user_with_card, demo_ils_config) -> None:
        from finna.boundary.ils.connection import ILSConnection

        demo_ils_config["lib"]["patrons"]["1234"]["password"] = "changed"
        ils = ILSConnection.from_config(demo_ils_config)

        with pytest.raises(HTTPException) as exc_info:
            await get_patron("lib", user_with_card, test_async_db, ils)

        assert exc_info.value.status_code == 403


class TestChannelLoaderDependency:
    """Test suite for get_channel_loader()."""

    def test_locale_from_accept_language(self) -> None:
        loader = get_channel_loader(MagicMock(), "sv-FI,sv;q=0.9,en;q=0.5")

        assert isinstance(loader, ChannelLoader)
        assert loader.locale == "sv-FI"
        assert "source.Solr" in loader.config

    def test_loaders_share_home_cache(self) -> None:
        first = get_channel_loader(MagicMock(), None)
        second = get_channel_loader(MagicMock(), None)

        assert first.cache is second.cache
        assert first.locale == ""


class TestServiceCache:
    """Test suite for ServiceCache."""

    def test_singleton(self) -> None:
        assert get_service_cache() is get_service_cache()

    def test_clear(self) -> None:
        cache = ServiceCache()
        _ = cache.home_channel_cache

        cache.clear()

        assert cache._home_channel_cache is None
