"""Tests for the health check router."""

from unittest.mock import Mock

from fastapi import FastAPI
from fastapi.testclient import TestClient
from helpers.catalog import make_item
import pytest

from mediafeed.library_session import LibrarySession
from mediafeed.record_store import RecordStore
from mediafeed.server.routers.health import router


@pytest.fixture
def client() -> TestClient:
    session = Mock(spec=LibrarySession)
    session.store = RecordStore([make_item("a"), make_item("b")])
    app = FastAPI()
    app.include_router(router)
    app.state.library_session = session
    return TestClient(app)


@pytest.mark.unit
def test_health_check_success(client: TestClient):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "mediafeed"
    assert data["item_count"] == 2
    assert "timestamp" in data
