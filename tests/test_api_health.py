"""Tests for the metadata API endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from splitsheet.api.routes import router
from splitsheet.domain import AVATAR_OPTIONS, ExpenseCategory


@pytest.fixture
def test_client():
    """Create a test client without lifespan (to avoid opening the registry)."""
    app = FastAPI()
    app.include_router(router, prefix="/api")
    return TestClient(app)


class TestHealthEndpoint:
    """Test the /api/health endpoint."""

    def test_health_check_returns_healthy_status(self, test_client):
        response = test_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "splitsheet"


class TestMetadataEndpoints:
    """Test the category and avatar listings."""

    def test_categories_cover_the_closed_set(self, test_client):
        response = test_client.get("/api/categories")

        assert response.status_code == 200
        ids = [c["id"] for c in response.json()]
        assert ids == [c.value for c in ExpenseCategory]
        assert all(c["label"] and c["icon"] for c in response.json())

    def test_avatars(self, test_client):
        response = test_client.get("/api/avatars")

        assert response.status_code == 200
        assert response.json() == AVATAR_OPTIONS
