"""
Test suite for channel API endpoints.

System role: Verification of channel HTTP API
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from finna.api.deps.dependencies import get_channel_loader
from finna.api.routers.channels import router
from finna.boundary.solr.connector import SearchBackendError
from finna.core.channels.registry import UnknownProviderError
from finna.core.search.records import RecordDriver, SearchParams, SearchResults
from finna.core.search.search_service import RecordMissingError, UnsupportedSourceError

CHANNEL = {
    "title": "Similar items: Kalevala",
    "providerId": "similaritems",
    "contents": [{"title": "Kanteletar", "source": "Solr", "thumbnail": False, "id": "fin.2"}],
    "links": [{"label": "View Record", "icon": "fa-file-text-o", "url": "/Record/fin.1"}],
}

TOKEN_CHANNEL = {"title": "Similar items: Aino", "providerId": "similaritems", "links": [], "token": "fin.3"}


@pytest.fixture
def mock_loader() -> MagicMock:
    loader = MagicMock()
    loader.get_home_context = AsyncMock(
        return_value={"token": None, "channels": [CHANNEL, TOKEN_CHANNEL]}
    )
    loader.get_record_context = AsyncMock(
        return_value={
            "driver": RecordDriver({"id": "fin.1", "title": "Kalevala"}),
            "channels": [CHANNEL],
            "token": None,
        }
    )
    loader.get_search_context = AsyncMock(
        return_value={
            "results": SearchResults(records=[], total=42, params=SearchParams(lookfor="kalevala")),
            "lookfor": "kalevala",
            "channels": [CHANNEL],
            "token": "fin.1",
        }
    )
    return loader


@pytest.fixture
def client(mock_loader) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_channel_loader] = lambda: mock_loader
    return TestClient(app)


class TestHomeChannels:
    """Test suite for GET /channels/home."""

    def test_home_channels(self, client, mock_loader) -> None:
        response = client.get("/channels/home", params={"channel": "similaritems"})

        assert response.status_code == 200
        data = response.json()
        assert data["channels"][0]["providerId"] == "similaritems"
        assert data["channels"][0]["contents"][0]["id"] == "fin.2"
        assert data["channels"][1]["token"] == "fin.3"
        assert data["channels"][1]["contents"] is None
        mock_loader.get_home_context.assert_awaited_once_with(None, "similaritems", None)

    def test_unknown_provider_is_server_error(self, client, mock_loader) -> None:
        mock_loader.get_home_context.side_effect = UnknownProviderError("facets")

        response = client.get("/channels/home")

        assert response.status_code == 500

    def test_search_backend_error(self, client, mock_loader) -> None:
        mock_loader.get_home_context.side_effect = SearchBackendError("down")

        response = client.get("/channels/home")

        assert response.status_code == 502


class TestRecordChannels:
    """Test suite for GET /channels/record/{record_id}."""

    def test_record_channels(self, client, mock_loader) -> None:
        response = client.get("/channels/record/fin.1")

        assert response.status_code == 200
        data = response.json()
        assert data["record"] == {"id": "fin.1", "source": "Solr", "title": "Kalevala"}
        assert len(data["channels"]) == 1
        mock_loader.get_record_context.assert_awaited_once_with("fin.1", None, None, "Solr")

    def test_missing_record(self, client, mock_loader) -> None:
        mock_loader.get_record_context.side_effect = RecordMissingError("nope")

        response = client.get("/channels/record/nope")

        assert response.status_code == 404

    def test_unsupported_source(self, client, mock_loader) -> None:
        mock_loader.get_record_context.side_effect = UnsupportedSourceError("Primo")

        response = client.get("/channels/record/fin.1", params={"source": "Primo"})

        assert response.status_code == 400


class TestSearchChannels:
    """Test suite for GET /channels/search."""

    def test_search_channels(self, client, mock_loader) -> None:
        response = client.get("/channels/search", params={"lookfor": "kalevala", "token": "fin.1"})

        assert response.status_code == 200
        data = response.json()
        assert data["lookfor"] == "kalevala"
        assert data["total"] == 42
        assert data["token"] == "fin.1"
        mock_loader.get_search_context.assert_awaited_once_with(
            {"lookfor": "kalevala"}, "fin.1", None, "Solr"
        )
