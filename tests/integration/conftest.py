"""Shared fixtures for integration tests."""

from collections.abc import AsyncGenerator, Iterator
from pathlib import Path

from fastapi import FastAPI
from helpers.alembic import run_migrations
from helpers.catalog import make_row
import httpx
import pytest
import pytest_asyncio
import respx

from mediafeed.backend import RestCatalogBackend
from mediafeed.db import FavoritesDatabase
from mediafeed.db.sqlalchemy_core import DB_FILENAME, SqlalchemyCore
from mediafeed.device_notifier import DeviceNotificationCenter
from mediafeed.library_session import LibrarySession
from mediafeed.server.app import create_app
from mediafeed.types import SessionContext

BACKEND_URL = "http://backend.test"
ADMIN_CONTEXT = SessionContext(user_id="admin-1", role="admin")


@pytest.fixture
def backend_router() -> Iterator[respx.MockRouter]:
    """Mock the backend REST API with a two-item catalog."""
    with respx.mock(
        base_url=f"{BACKEND_URL}/rest/v1", assert_all_called=False
    ) as router:
        router.get("/media_items", name="catalog").mock(
            return_value=httpx.Response(
                200, json=[make_row("b", minutes=1), make_row("a", views=5)]
            )
        )
        router.get("/video_likes", name="likes").mock(
            return_value=httpx.Response(200, json=[{"video_id": "a"}])
        )
        router.get("/video_comments", name="comments").mock(
            return_value=httpx.Response(200, json=[])
        )
        router.get("/church_events", name="events").mock(
            return_value=httpx.Response(200, json=[])
        )
        router.post("/rpc/increment_views", name="increment_views").mock(
            return_value=httpx.Response(204)
        )
        router.post("/video_likes", name="like").mock(
            return_value=httpx.Response(201)
        )
        router.delete("/media_items", name="delete_item").mock(
            return_value=httpx.Response(204)
        )
        yield router


@pytest_asyncio.fixture
async def db_core(tmp_path: Path) -> AsyncGenerator[SqlalchemyCore]:
    run_migrations(tmp_path / DB_FILENAME)
    core = SqlalchemyCore(tmp_path)
    yield core
    await core.close()


@pytest.fixture
def device_center() -> DeviceNotificationCenter:
    return DeviceNotificationCenter(grant_on_request=True)


@pytest_asyncio.fixture
async def library_session(
    backend_router: respx.MockRouter,
    db_core: SqlalchemyCore,
    device_center: DeviceNotificationCenter,
) -> AsyncGenerator[LibrarySession]:
    """A started LibrarySession over the mocked backend and a real database."""
    backend = RestCatalogBackend(base_url=BACKEND_URL, api_key="anon-key")
    session = LibrarySession(
        backend=backend,
        favorites_db=FavoritesDatabase(db_core),
        device=device_center,
        context=ADMIN_CONTEXT,
        page_size=12,
    )
    await session.start()
    yield session
    await session.stop()
    await backend.aclose()


@pytest.fixture
def app(
    library_session: LibrarySession, device_center: DeviceNotificationCenter
) -> FastAPI:
    return create_app(library_session, device_center)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    """HTTP client running the app on the test's event loop."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver"
    ) as http_client:
        yield http_client
