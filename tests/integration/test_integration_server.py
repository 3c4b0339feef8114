"""End-to-end tests through the HTTP API, a real session and a mocked backend."""

import asyncio

from helpers.catalog import make_row
import httpx
import pytest
import respx

from mediafeed.db import FavoritesDatabase
from mediafeed.db.sqlalchemy_core import SqlalchemyCore
from mediafeed.library_session import LibrarySession


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_initial_page_has_aggregates(client: httpx.AsyncClient):
    response = await client.get("/api/library")

    assert response.status_code == 200
    items = response.json()["items"]
    assert [i["id"] for i in items] == ["b", "a"]
    assert items[1]["like_count"] == 1
    assert items[1]["is_liked"] is True


@pytest.mark.integration
@pytest.mark.asyncio
async def test_remote_insert_notifies_and_opens(
    client: httpx.AsyncClient,
    library_session: LibrarySession,
    backend_router: respx.MockRouter,
):
    payload = {
        "type": "INSERT",
        "table": "media_items",
        "record": make_row("x", minutes=30, title="Feast Day"),
    }

    response = await client.post("/api/hooks/catalog-changes", json=payload)
    assert response.json() == {"accepted": True}
    await _settle()

    page = (await client.get("/api/library")).json()
    assert page["items"][0]["id"] == "x"

    notifications = (await client.get("/api/notifications")).json()
    assert notifications["unread_count"] == 1
    notification = notifications["notifications"][0]
    assert notification["message"] == "Feast Day has been added to the library"

    device = (await client.get("/api/device-notifications")).json()
    assert [d["tag"] for d in device] == ["x"]

    opened = await client.post(f"/api/notifications/{notification['id']}/open")
    assert opened.status_code == 200
    assert opened.json()["views"] == 1
    await library_session.wait_pending()
    assert backend_router["increment_views"].called


@pytest.mark.integration
@pytest.mark.asyncio
async def test_delete_then_notification_click_is_noop(
    client: httpx.AsyncClient, backend_router: respx.MockRouter
):
    await client.post(
        "/api/hooks/catalog-changes",
        json={"type": "INSERT", "record": make_row("x", minutes=30)},
    )
    await _settle()
    notification_id = (await client.get("/api/notifications")).json()[
        "notifications"
    ][0]["id"]

    response = await client.delete("/api/library/items/x")
    assert response.status_code == 204
    assert backend_router["delete_item"].calls.last.request.url.params["id"] == "eq.x"

    opened = await client.post(f"/api/notifications/{notification_id}/open")
    assert opened.status_code == 204
    notifications = (await client.get("/api/notifications")).json()
    assert len(notifications["notifications"]) == 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_favorite_is_persisted(
    client: httpx.AsyncClient, db_core: SqlalchemyCore
):
    response = await client.post("/api/library/items/a/favorite")
    assert response.json() == {"item_id": "a", "favorite": True}

    assert await FavoritesDatabase(db_core).get_favorite_ids() == {"a"}

    await client.patch("/api/library/view", json={"section": "favorites"})
    page = (await client.get("/api/library")).json()
    assert [i["id"] for i in page["items"]] == ["a"]
