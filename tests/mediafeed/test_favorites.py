"""Tests for the FavoriteSet."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from mediafeed.db import FavoritesDatabase
from mediafeed.exceptions import DatabaseOperationError
from mediafeed.favorites import FavoriteSet


@pytest.fixture
def mock_db() -> MagicMock:
    db = MagicMock(spec=FavoritesDatabase)
    db.get_favorite_ids = AsyncMock(return_value={"a", "b"})
    db.add_favorite = AsyncMock()
    db.remove_favorite = AsyncMock(return_value=True)
    return db


@pytest.fixture
def favorites(mock_db: MagicMock) -> FavoriteSet:
    return FavoriteSet(mock_db)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_load(favorites: FavoriteSet):
    await favorites.load()

    assert favorites.ids() == frozenset({"a", "b"})
    assert "a" in favorites
    assert len(favorites) == 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_toggle_adds_then_removes(favorites: FavoriteSet, mock_db: MagicMock):
    assert await favorites.toggle("x") is True
    mock_db.add_favorite.assert_awaited_once_with("x")
    assert "x" in favorites

    assert await favorites.toggle("x") is False
    mock_db.remove_favorite.assert_awaited_once_with("x")
    assert "x" not in favorites


@pytest.mark.unit
@pytest.mark.asyncio
async def test_toggle_keeps_memory_state_when_db_fails(
    favorites: FavoriteSet, mock_db: MagicMock
):
    mock_db.add_favorite.side_effect = DatabaseOperationError("disk full")

    assert await favorites.toggle("x") is True
    assert "x" in favorites


@pytest.mark.unit
@pytest.mark.asyncio
async def test_load_failure_propagates(favorites: FavoriteSet, mock_db: MagicMock):
    mock_db.get_favorite_ids.side_effect = DatabaseOperationError("locked")

    with pytest.raises(DatabaseOperationError):
        await favorites.load()
    assert favorites.ids() == frozenset()


@pytest.mark.unit
def test_snapshot_is_detached(favorites: FavoriteSet):
    snapshot = favorites.ids()
    favorites._ids.add("late")  # pyright: ignore[reportPrivateUsage]

    assert "late" not in snapshot
