"""Tests for the RestCatalogBackend using respx-mocked HTTP."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
import json

from helpers.catalog import make_row
import httpx
import pytest
import pytest_asyncio
import respx

from mediafeed.backend import RestCatalogBackend
from mediafeed.exceptions import BackendError
from mediafeed.types import Category, ItemDraft

BASE_URL = "http://test"
REST_URL = f"{BASE_URL}/rest/v1"


@pytest_asyncio.fixture
async def backend() -> AsyncGenerator[RestCatalogBackend]:
    client = RestCatalogBackend(base_url=BASE_URL + "/", api_key="secret")
    yield client
    await client.aclose()


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_fetch_catalog(backend: RestCatalogBackend):
    route = respx.get(f"{REST_URL}/media_items").mock(
        return_value=httpx.Response(200, json=[make_row("a")])
    )

    rows = await backend.fetch_catalog()

    assert rows[0]["id"] == "a"
    request = route.calls.last.request
    assert request.url.params["order"] == "created_at.desc"
    assert request.headers["apikey"] == "secret"
    assert request.headers["Authorization"] == "Bearer secret"


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_error_status_raises_backend_error(backend: RestCatalogBackend):
    respx.get(f"{REST_URL}/media_items").mock(return_value=httpx.Response(503))

    with pytest.raises(BackendError) as exc_info:
        await backend.fetch_catalog()

    assert exc_info.value.status_code == 503
    assert exc_info.value.operation == "fetch catalog"


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_transport_error_raises_backend_error(backend: RestCatalogBackend):
    respx.post(f"{REST_URL}/rpc/increment_views").mock(
        side_effect=httpx.ConnectError("refused")
    )

    with pytest.raises(BackendError) as exc_info:
        await backend.increment_views("a")

    assert exc_info.value.item_id == "a"
    assert exc_info.value.status_code is None


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_non_list_payload_rejected(backend: RestCatalogBackend):
    respx.get(f"{REST_URL}/church_events").mock(
        return_value=httpx.Response(200, json={"message": "nope"})
    )

    with pytest.raises(BackendError):
        await backend.fetch_events()


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_insert_item_returns_created_row(backend: RestCatalogBackend):
    route = respx.post(f"{REST_URL}/media_items").mock(
        return_value=httpx.Response(201, json=[make_row("new")])
    )
    draft = ItemDraft(media_ref="dQw4w9WgXcQ", title="T", category=Category.HYMNS)

    row = await backend.insert_item(draft, created_by="admin-1")

    assert row["id"] == "new"
    request = route.calls.last.request
    assert request.headers["Prefer"] == "return=representation"
    body = json.loads(request.content)
    assert body["youtube_id"] == "dQw4w9WgXcQ"
    assert body["category"] == "Hymns"
    assert body["created_by"] == "admin-1"


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_insert_without_representation_fails(backend: RestCatalogBackend):
    respx.post(f"{REST_URL}/church_events").mock(
        return_value=httpx.Response(201, json=[])
    )

    with pytest.raises(BackendError):
        await backend.insert_event("Vespers", datetime.now(UTC), "admin-1")


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_delete_item_filters_by_id(backend: RestCatalogBackend):
    route = respx.delete(f"{REST_URL}/media_items").mock(
        return_value=httpx.Response(204)
    )

    await backend.delete_item("a")

    assert route.calls.last.request.url.params["id"] == "eq.a"


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_like_counts_are_aggregated(backend: RestCatalogBackend):
    route = respx.get(f"{REST_URL}/video_likes").mock(
        return_value=httpx.Response(
            200, json=[{"video_id": "a"}, {"video_id": "a"}, {"video_id": "b"}]
        )
    )

    counts = await backend.fetch_like_counts(["a", "b", "c"])

    assert counts == {"a": 2, "b": 1}
    assert route.calls.last.request.url.params["video_id"] == 'in.("a","b","c")'


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_aggregates_skip_request_for_empty_ids(backend: RestCatalogBackend):
    """No route is registered, so any request would fail the test."""
    assert await backend.fetch_comment_counts([]) == {}
    assert await backend.fetch_user_likes("u1", []) == set()
    assert await backend.fetch_profile_names([]) == {}


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_fetch_profile_names(backend: RestCatalogBackend):
    respx.get(f"{REST_URL}/profiles").mock(
        return_value=httpx.Response(
            200,
            json=[
                {"id": "u1", "full_name": "Mina"},
                {"id": "u2", "full_name": None},
            ],
        )
    )

    assert await backend.fetch_profile_names({"u1", "u2"}) == {"u1": "Mina"}


@pytest.mark.unit
@pytest.mark.asyncio
@respx.mock
async def test_update_comment_scoped_to_author(backend: RestCatalogBackend):
    route = respx.patch(f"{REST_URL}/video_comments").mock(
        return_value=httpx.Response(204)
    )

    await backend.update_comment("c1", "u1", "edited")

    request = route.calls.last.request
    assert request.url.params["id"] == "eq.c1"
    assert request.url.params["user_id"] == "eq.u1"
    assert json.loads(request.content)["content"] == "edited"
