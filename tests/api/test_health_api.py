"""
Test suite for health API endpoints.

System role: Verification of health check HTTP API
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from finna.api.deps.dependencies import get_search_service
from finna.api.routers.health import router
from finna.boundary.db import get_async_db


@pytest.fixture
def mock_db() -> MagicMock:
    db = MagicMock()
    db.execute = AsyncMock()
    return db


@pytest.fixture
def mock_search_service() -> MagicMock:
    connector = MagicMock()
    connector.ping = AsyncMock(return_value=True)
    service = MagicMock()
    service.connectors = {"Solr": connector}
    return service


@pytest.fixture
def client(mock_db, mock_search_service) -> TestClient:
    app = FastAPI()
    app.include_router(router)

    async def override_db():
        yield mock_db

    app.dependency_overrides[get_async_db] = override_db
    app.dependency_overrides[get_search_service] = lambda: mock_search_service
    return TestClient(app)


class TestHealthEndpoints:
    """Test suite for /health endpoints."""

    def test_health_check(self, client) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "message": "Server Healthy"}

    def test_db_health(self, client, mock_db) -> None:
        response = client.get("/health/db")

        assert response.status_code == 200
        mock_db.execute.assert_awaited_once()

    def test_db_unavailable(self, client, mock_db) -> None:
        mock_db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))

        response = client.get("/health/db")

        assert response.status_code == 503

    def test_search_health(self, client) -> None:
        response = client.get("/health/search")

        assert response.status_code == 200
        assert response.json()["message"] == "Search index accessible"

    def test_search_unavailable(self, client, mock_search_service) -> None:
        mock_search_service.connectors["Solr"].ping.return_value = False

        response = client.get("/health/search")

        assert response.status_code == 503
        assert response.json()["detail"] == "Search backend Solr unavailable"
