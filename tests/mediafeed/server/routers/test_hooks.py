"""Tests for the change webhook endpoint."""

from unittest.mock import Mock

from fastapi import FastAPI
from fastapi.testclient import TestClient
from helpers.catalog import make_row
import pytest

from mediafeed.library_session import LibrarySession
from mediafeed.server.routers.hooks import router


@pytest.fixture
def mock_session() -> Mock:
    return Mock(spec=LibrarySession)


@pytest.fixture
def client(mock_session: Mock) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.state.library_session = mock_session
    return TestClient(app)


@pytest.mark.unit
@pytest.mark.parametrize("accepted", [True, False])
def test_catalog_change(client: TestClient, mock_session: Mock, accepted: bool):
    mock_session.ingest_change.return_value = accepted
    payload = {"type": "INSERT", "table": "media_items", "record": make_row("a")}

    response = client.post("/api/hooks/catalog-changes", json=payload)

    assert response.status_code == 202
    assert response.json() == {"accepted": accepted}
    mock_session.ingest_change.assert_called_once_with(payload)


@pytest.mark.unit
def test_catalog_change_requires_object(client: TestClient):
    response = client.post("/api/hooks/catalog-changes", json=["not", "a", "dict"])

    assert response.status_code == 422
