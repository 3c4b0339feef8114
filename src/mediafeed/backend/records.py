"""Mapping between backend rows and domain types."""

from typing import Any

from pydantic import ValidationError

from ..exceptions import MalformedRecordError
from ..types import CatalogItem, Comment, EventEntry
from .base import Row

# media_items column -> CatalogItem field
ITEM_COLUMN_FIELDS: dict[str, str] = {
    "id": "id",
    "youtube_id": "media_ref",
    "title": "title",
    "description": "description",
    "category": "category",
    "thumbnail_url": "thumbnail",
    "views": "views",
    "created_at": "created_at",
}

_REQUIRED_ITEM_COLUMNS = ("id", "title", "category", "created_at")


def _malformed_from_validation(e: ValidationError, row: Row) -> MalformedRecordError:
    first = e.errors()[0]
    loc = first.get("loc") or ("<row>",)
    field_name = str(loc[0])
    return MalformedRecordError(
        f"Invalid value for field: {first.get('msg', 'validation failed')}",
        field_name=field_name,
        actual_value=row.get(field_name),
    )


def item_fields_from_row(row: Row) -> dict[str, Any]:
    """Translate the known columns of a media_items row to item fields.

    Unknown columns (``created_by``, ``updated_at``, ...) are dropped.

    Args:
        row: A media_items row, possibly partial.

    Returns:
        Mapping of CatalogItem field name to raw value.
    """
    return {
        field_name: row[column]
        for column, field_name in ITEM_COLUMN_FIELDS.items()
        if column in row
    }


def item_from_row(
    row: Row,
    like_count: int = 0,
    is_liked: bool = False,
    comment_count: int = 0,
) -> CatalogItem:
    """Build a CatalogItem from a media_items row.

    Args:
        row: A complete media_items row.
        like_count: Aggregated like count for the item.
        is_liked: Whether the signed-in user liked the item.
        comment_count: Aggregated comment count for the item.

    Returns:
        The mapped CatalogItem.

    Raises:
        MalformedRecordError: If a required column is missing or a value is
            invalid (for example a negative view count).
    """
    for column in _REQUIRED_ITEM_COLUMNS:
        if row.get(column) is None:
            raise MalformedRecordError("Field is required", field_name=column)

    fields = item_fields_from_row(row)
    fields["media_ref"] = fields.get("media_ref") or ""
    fields["description"] = fields.get("description") or ""
    fields["thumbnail"] = fields.get("thumbnail") or ""
    if fields.get("views") is None:
        fields["views"] = 0
    fields["id"] = str(fields["id"])

    try:
        return CatalogItem.model_validate(
            {
                **fields,
                "like_count": like_count,
                "is_liked": is_liked,
                "comment_count": comment_count,
            }
        )
    except ValidationError as e:
        raise _malformed_from_validation(e, row) from e


def comment_from_row(row: Row, user_name: str | None = None) -> Comment:
    """Build a Comment from a video_comments row.

    Raises:
        MalformedRecordError: If the row cannot be mapped.
    """
    try:
        return Comment(
            id=str(row["id"]),
            item_id=str(row["video_id"]),
            user_id=str(row["user_id"]),
            user_name=user_name or "Anonymous",
            content=row["content"],
            created_at=row["created_at"],
            updated_at=row.get("updated_at"),
        )
    except KeyError as e:
        raise MalformedRecordError(
            "Field is required", field_name=str(e.args[0])
        ) from e
    except ValidationError as e:
        raise _malformed_from_validation(e, row) from e


def event_from_row(row: Row) -> EventEntry:
    """Build an EventEntry from a church_events row.

    Raises:
        MalformedRecordError: If the row cannot be mapped.
    """
    try:
        return EventEntry(
            id=str(row["id"]),
            title=row["title"],
            event_date=row["event_date"],
            created_at=row.get("created_at"),
        )
    except KeyError as e:
        raise MalformedRecordError(
            "Field is required", field_name=str(e.args[0])
        ) from e
    except ValidationError as e:
        raise _malformed_from_validation(e, row) from e
