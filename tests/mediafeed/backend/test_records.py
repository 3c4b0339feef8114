"""Tests for backend row mapping."""

from helpers.catalog import make_row
import pytest

from mediafeed.backend.records import (
    comment_from_row,
    event_from_row,
    item_fields_from_row,
    item_from_row,
)
from mediafeed.exceptions import MalformedRecordError
from mediafeed.types import Category


@pytest.mark.unit
def test_item_from_row():
    item = item_from_row(make_row("a", views=7), like_count=3, is_liked=True)

    assert item.id == "a"
    assert item.media_ref == "dQw4w9WgXcQ"
    assert item.category is Category.SERMONS
    assert item.thumbnail == "https://img.example.com/a.jpg"
    assert (item.views, item.like_count, item.is_liked) == (7, 3, True)


@pytest.mark.unit
def test_item_from_row_fills_nullable_columns():
    item = item_from_row(
        make_row("a", description=None, thumbnail_url=None, views=None, id=12)
    )

    assert item.id == "12"
    assert item.description == ""
    assert item.thumbnail == ""
    assert item.views == 0


@pytest.mark.unit
@pytest.mark.parametrize(
    ("overrides", "field_name"),
    [
        ({"title": None}, "title"),
        ({"created_at": None}, "created_at"),
        ({"category": "Cooking"}, "category"),
        ({"views": -2}, "views"),
    ],
)
def test_item_from_row_rejects_bad_rows(overrides: dict[str, object], field_name: str):
    with pytest.raises(MalformedRecordError) as exc_info:
        item_from_row(make_row("a", **overrides))

    assert exc_info.value.field_name == field_name


@pytest.mark.unit
def test_item_fields_from_row_drops_unknown_columns():
    fields = item_fields_from_row({"views": 3, "updated_at": "x", "youtube_id": "v"})

    assert fields == {"views": 3, "media_ref": "v"}


@pytest.mark.unit
def test_comment_from_row():
    comment = comment_from_row(
        {
            "id": 5,
            "video_id": "a",
            "user_id": "u1",
            "content": "Amen",
            "created_at": "2025-01-01T12:00:00+00:00",
        },
        user_name=None,
    )

    assert comment.id == "5"
    assert comment.user_name == "Anonymous"
    assert comment.updated_at is None


@pytest.mark.unit
def test_comment_from_row_missing_column():
    with pytest.raises(MalformedRecordError) as exc_info:
        comment_from_row({"id": 5, "video_id": "a", "user_id": "u1"})

    assert exc_info.value.field_name == "content"


@pytest.mark.unit
def test_event_from_row_rejects_naive_date():
    with pytest.raises(MalformedRecordError):
        event_from_row({"id": "e", "title": "x", "event_date": "2025-01-01T10:00:00"})
