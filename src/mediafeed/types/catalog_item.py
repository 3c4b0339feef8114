"""Catalog item model and the add-item request."""

from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator

from ..exceptions import InvalidMediaUrlError
from ..media_url import extract_media_ref, thumbnail_for
from .category import Category

# Fields a remote update may overwrite without desynchronizing the
# aggregates that only a full reload maintains.
REMOTE_SAFE_FIELDS: frozenset[str] = frozenset({"views"})

# Fields the local session owns; an insert for an existing id never
# touches them.
LOCALLY_OWNED_FIELDS: frozenset[str] = frozenset(
    {"like_count", "is_liked", "comment_count"}
)

DEFAULT_DRAFT_TITLE = "New Video"
DEFAULT_DRAFT_DESCRIPTION = "No description provided"


class CatalogItem(BaseModel):
    """Represent one playable media entry with engagement metadata.

    Instances are immutable; the record store replaces an item wholesale
    when a field changes, so every snapshot handed out stays consistent.

    Attributes:
        id: Opaque identifier assigned by the backend.
        media_ref: External media reference (YouTube video id).
        title: Item title.
        description: Item description.
        category: Item category (never ``Category.ALL``).
        thumbnail: Thumbnail URL.
        views: View count.
        like_count: Number of likes across all users.
        is_liked: Whether the signed-in user liked the item.
        comment_count: Number of comments.
        created_at: Creation timestamp assigned by the backend.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    media_ref: str
    title: str
    description: str = ""
    category: Category
    thumbnail: str = ""
    views: int = Field(default=0, ge=0)
    like_count: int = Field(default=0, ge=0)
    is_liked: bool = False
    comment_count: int = Field(default=0, ge=0)
    created_at: AwareDatetime

    @field_validator("category")
    @classmethod
    def reject_filter_only_category(cls, v: Category) -> Category:
        """Reject the filter-only ``All`` category.

        Args:
            v: Category to validate.

        Returns:
            The category unchanged.

        Raises:
            ValueError: If the category is ``Category.ALL``.
        """
        if v is Category.ALL:
            raise ValueError("'All' is a filter value, not an item category")
        return v

    def with_fields(self, fields: dict[str, Any]) -> "CatalogItem":
        """Return a validated copy with ``fields`` applied.

        Fields absent from ``fields`` keep their current value.

        Args:
            fields: Partial field set to apply.

        Returns:
            New CatalogItem.

        Raises:
            ValueError: If a field is unknown or the result fails validation.
        """
        unknown = set(fields) - set(CatalogItem.model_fields)
        if unknown:
            raise ValueError(f"Unknown catalog item fields: {sorted(unknown)}")
        if "id" in fields and fields["id"] != self.id:
            raise ValueError("Catalog item id is immutable")
        return CatalogItem.model_validate({**self.model_dump(), **fields})


class ItemDraft(BaseModel):
    """Admin-supplied fields for a new catalog item.

    The backend assigns the id and creation timestamp.

    Attributes:
        media_ref: External media reference (YouTube video id).
        title: Item title.
        description: Item description.
        category: Item category.
        thumbnail: Thumbnail URL.
    """

    model_config = ConfigDict(frozen=True)

    media_ref: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str = ""
    category: Category = Category.SERMONS
    thumbnail: str = ""

    @field_validator("category")
    @classmethod
    def reject_filter_only_category(cls, v: Category) -> Category:
        """Reject the filter-only ``All`` category."""
        if v is Category.ALL:
            raise ValueError("'All' is a filter value, not an item category")
        return v

    @classmethod
    def from_url(
        cls,
        url: str,
        title: str = "",
        description: str = "",
        category: Category = Category.SERMONS,
    ) -> "ItemDraft":
        """Build a draft from a media URL entered by an admin.

        The thumbnail is derived from the video id; blank titles and
        descriptions get placeholder text.

        Args:
            url: Video URL or bare video id.
            title: Item title.
            description: Item description.
            category: Item category.

        Returns:
            The draft.

        Raises:
            InvalidMediaUrlError: If no video id can be read from ``url``.
        """
        media_ref = extract_media_ref(url)
        if media_ref is None:
            raise InvalidMediaUrlError("Invalid YouTube URL.", url=url)
        return cls(
            media_ref=media_ref,
            title=title.strip() or DEFAULT_DRAFT_TITLE,
            description=description.strip() or DEFAULT_DRAFT_DESCRIPTION,
            category=category,
            thumbnail=thumbnail_for(media_ref),
        )
