# pyright: reportPrivateUsage=false

"""Tests for the library router endpoints."""

from unittest.mock import AsyncMock, Mock

from fastapi import FastAPI
from fastapi.testclient import TestClient
from helpers.catalog import make_item
import pytest

from mediafeed.event_reconciler import DetailView
from mediafeed.exceptions import (
    BackendError,
    CommentError,
    ItemCreateError,
    ItemDeleteError,
    NotFoundError,
)
from mediafeed.library_session import LibrarySession, LibraryStats
from mediafeed.record_store import RecordStore
from mediafeed.server.routers.library import router
from mediafeed.types import (
    Category,
    ItemDraft,
    Section,
    SessionContext,
    SortKey,
    ViewParameters,
)
from mediafeed.view_pipeline import DerivedView

LIBRARY_PREFIX = "/api/library"
ITEM = make_item("a", views=3)


@pytest.fixture
def context() -> SessionContext:
    return SessionContext(user_id="admin-1", role="admin")


@pytest.fixture
def mock_session(context: SessionContext) -> Mock:
    """Create a mock LibrarySession holding one item."""
    session = Mock(spec=LibrarySession)
    session.context = context
    session.store = RecordStore([ITEM])
    session.detail = DetailView()
    session.view_parameters = ViewParameters()
    session.current_view.return_value = DerivedView(
        items=(ITEM,), page=1, total_pages=1, total_items=1
    )
    return session


@pytest.fixture
def app(mock_session: Mock) -> FastAPI:
    """Create a FastAPI app with the library router and a mocked session."""
    app = FastAPI()
    app.include_router(router)
    app.state.library_session = mock_session
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


# --- Derived view ---


@pytest.mark.unit
def test_get_library(client: TestClient):
    response = client.get(LIBRARY_PREFIX)

    assert response.status_code == 200
    data = response.json()
    assert [i["id"] for i in data["items"]] == ["a"]
    assert data["page"] == 1
    assert data["total_pages"] == 1
    assert data["view"]["sort"] == "newest"


@pytest.mark.unit
def test_update_view_passes_only_given_fields(client: TestClient, mock_session: Mock):
    response = client.patch(
        f"{LIBRARY_PREFIX}/view", json={"section": "favorites", "sort": "popular"}
    )

    assert response.status_code == 200
    mock_session.update_view.assert_called_once_with(
        section=Section.FAVORITES, sort=SortKey.POPULAR
    )


@pytest.mark.unit
def test_update_view_rejects_unknown_category(client: TestClient):
    response = client.patch(f"{LIBRARY_PREFIX}/view", json={"category": "Cooking"})

    assert response.status_code == 422


@pytest.mark.unit
def test_set_page(client: TestClient, mock_session: Mock):
    mock_session.set_page.return_value = DerivedView(
        items=(), page=2, total_pages=2, total_items=13
    )

    response = client.put(f"{LIBRARY_PREFIX}/page", json={"page": 5})

    assert response.status_code == 200
    assert response.json()["page"] == 2
    mock_session.set_page.assert_called_once_with(5)


@pytest.mark.unit
def test_set_page_rejects_zero(client: TestClient):
    assert client.put(f"{LIBRARY_PREFIX}/page", json={"page": 0}).status_code == 422


@pytest.mark.unit
def test_stats_requires_admin(client: TestClient, mock_session: Mock):
    mock_session.stats.return_value = LibraryStats(
        item_count=1, total_views=3, focus_category=Category.ALL
    )
    assert client.get(f"{LIBRARY_PREFIX}/stats").json()["total_views"] == 3

    mock_session.context = SessionContext(user_id="u", role="user")
    assert client.get(f"{LIBRARY_PREFIX}/stats").status_code == 403


@pytest.mark.unit
def test_reload_failure_is_bad_gateway(client: TestClient, mock_session: Mock):
    mock_session.reload = AsyncMock(side_effect=BackendError("down"))

    assert client.post(f"{LIBRARY_PREFIX}/reload").status_code == 502


@pytest.mark.unit
def test_reload(client: TestClient, mock_session: Mock):
    mock_session.reload = AsyncMock(return_value=7)

    response = client.post(f"{LIBRARY_PREFIX}/reload")

    assert response.json() == {"item_count": 7}


# --- Item commands ---


@pytest.mark.unit
def test_play(client: TestClient, mock_session: Mock):
    mock_session.play.return_value = ITEM.with_fields({"views": 4})

    response = client.post(f"{LIBRARY_PREFIX}/items/a/play")

    assert response.status_code == 200
    assert response.json()["views"] == 4


@pytest.mark.unit
def test_play_unknown_item(client: TestClient, mock_session: Mock):
    mock_session.play.side_effect = NotFoundError("gone")

    assert client.post(f"{LIBRARY_PREFIX}/items/zz/play").status_code == 404


@pytest.mark.unit
def test_invalid_item_id(client: TestClient):
    assert client.post(f"{LIBRARY_PREFIX}/items/a.b/play").status_code == 422


@pytest.mark.unit
def test_like(client: TestClient, mock_session: Mock):
    mock_session.toggle_like.return_value = ITEM.with_fields(
        {"is_liked": True, "like_count": 1}
    )

    response = client.post(f"{LIBRARY_PREFIX}/items/a/like")

    assert response.json()["is_liked"] is True


@pytest.mark.unit
def test_favorite(client: TestClient, mock_session: Mock):
    mock_session.toggle_favorite = AsyncMock(return_value=True)

    response = client.post(f"{LIBRARY_PREFIX}/items/zz/favorite")

    assert response.json() == {"item_id": "zz", "favorite": True}


@pytest.mark.unit
def test_add_item(client: TestClient, mock_session: Mock):
    mock_session.add_item = AsyncMock(return_value=make_item("new"))

    response = client.post(
        f"{LIBRARY_PREFIX}/items",
        json={"url": "https://youtu.be/dQw4w9WgXcQ", "category": "Hymns"},
    )

    assert response.status_code == 201
    assert response.json()["id"] == "new"
    draft: ItemDraft = mock_session.add_item.await_args.args[0]
    assert draft.media_ref == "dQw4w9WgXcQ"
    assert draft.category is Category.HYMNS
    assert draft.title == "New Video"


@pytest.mark.unit
def test_add_item_invalid_url(client: TestClient, mock_session: Mock):
    mock_session.add_item = AsyncMock()

    response = client.post(f"{LIBRARY_PREFIX}/items", json={"url": "not a video"})

    assert response.status_code == 400
    mock_session.add_item.assert_not_called()


@pytest.mark.unit
def test_add_item_backend_failure(client: TestClient, mock_session: Mock):
    mock_session.add_item = AsyncMock(side_effect=ItemCreateError("down"))

    response = client.post(f"{LIBRARY_PREFIX}/items", json={"url": "dQw4w9WgXcQ"})

    assert response.status_code == 502


@pytest.mark.unit
def test_add_item_requires_admin(client: TestClient, mock_session: Mock):
    mock_session.context = SessionContext(user_id="u", role="user")

    response = client.post(f"{LIBRARY_PREFIX}/items", json={"url": "dQw4w9WgXcQ"})

    assert response.status_code == 403


@pytest.mark.unit
def test_delete_item(client: TestClient, mock_session: Mock):
    mock_session.delete_item = AsyncMock()

    assert client.delete(f"{LIBRARY_PREFIX}/items/a").status_code == 204
    mock_session.delete_item.assert_awaited_once_with("a")


@pytest.mark.unit
@pytest.mark.parametrize(
    ("item_id", "side_effect", "status"),
    [("zz", None, 404), ("a", ItemDeleteError("down"), 502)],
)
def test_delete_item_errors(
    client: TestClient,
    mock_session: Mock,
    item_id: str,
    side_effect: Exception | None,
    status: int,
):
    mock_session.delete_item = AsyncMock(side_effect=side_effect)

    assert client.delete(f"{LIBRARY_PREFIX}/items/{item_id}").status_code == status


# --- Detail view ---


@pytest.mark.unit
def test_detail(client: TestClient, mock_session: Mock):
    assert client.get(f"{LIBRARY_PREFIX}/detail").json()["item"] is None

    mock_session.detail.open(ITEM)
    data = client.get(f"{LIBRARY_PREFIX}/detail").json()
    assert data["item"]["id"] == "a"
    assert data["opened_at"] is not None

    assert client.delete(f"{LIBRARY_PREFIX}/detail").status_code == 204
    mock_session.close_detail.assert_called_once_with()


# --- Comments ---


@pytest.mark.unit
def test_add_comment(client: TestClient, mock_session: Mock):
    mock_session.add_comment = AsyncMock()
    mock_session.comments = AsyncMock(return_value=[])

    response = client.post(
        f"{LIBRARY_PREFIX}/items/a/comments", json={"content": "Amen"}
    )

    assert response.status_code == 201
    mock_session.add_comment.assert_awaited_once_with("a", "Amen")


@pytest.mark.unit
def test_blank_comment_rejected(client: TestClient, mock_session: Mock):
    mock_session.add_comment = AsyncMock()

    response = client.post(
        f"{LIBRARY_PREFIX}/items/a/comments", json={"content": "   "}
    )

    assert response.status_code == 422
    mock_session.add_comment.assert_not_called()


@pytest.mark.unit
def test_comment_failure_is_bad_gateway(client: TestClient, mock_session: Mock):
    mock_session.delete_comment = AsyncMock(side_effect=CommentError("down"))

    assert client.delete(f"{LIBRARY_PREFIX}/comments/c1").status_code == 502


@pytest.mark.unit
def test_close_comments(client: TestClient, mock_session: Mock):
    mock_session.close_comments = AsyncMock(return_value=True)

    response = client.post(f"{LIBRARY_PREFIX}/items/a/comments/close")

    assert response.status_code == 200
    mock_session.close_comments.assert_awaited_once_with("a")
