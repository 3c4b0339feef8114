"""Backend collaborator protocol.

The library engine talks to the managed backend only through this
protocol. Rows are returned as plain mappings in the backend's column
naming; mapping them to domain types is the job of
:mod:`mediafeed.backend.records`.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol

from ..types import ItemDraft

Row = dict[str, Any]


class CatalogBackend(Protocol):
    """Protocol for every backend call the engine makes.

    Every method raises :class:`~mediafeed.exceptions.BackendError` when the
    call fails, whether in transport or with an error status.
    """

    # --- Catalog ---

    async def fetch_catalog(self) -> list[Row]:
        """Return all catalog rows, newest first."""
        ...

    async def insert_item(self, draft: ItemDraft, created_by: str) -> Row:
        """Create a catalog row and return it with id and creation time.

        Args:
            draft: Admin-supplied fields.
            created_by: Identifier of the creating user.

        Returns:
            The created row as stored by the backend.
        """
        ...

    async def delete_item(self, item_id: str) -> None:
        """Delete a catalog row."""
        ...

    async def like_item(self, item_id: str, user_id: str) -> None:
        """Record that ``user_id`` likes ``item_id``."""
        ...

    async def unlike_item(self, item_id: str, user_id: str) -> None:
        """Remove the like of ``user_id`` on ``item_id``."""
        ...

    async def increment_views(self, item_id: str) -> None:
        """Increment the stored view count of ``item_id`` by one."""
        ...

    async def fetch_like_counts(self, item_ids: Iterable[str]) -> dict[str, int]:
        """Return the number of likes per item id (absent ids have none)."""
        ...

    async def fetch_user_likes(
        self, user_id: str, item_ids: Iterable[str]
    ) -> set[str]:
        """Return the subset of ``item_ids`` liked by ``user_id``."""
        ...

    async def fetch_comment_counts(self, item_ids: Iterable[str]) -> dict[str, int]:
        """Return the number of comments per item id (absent ids have none)."""
        ...

    # --- Comments ---

    async def fetch_comments(self, item_id: str) -> list[Row]:
        """Return the comment rows of ``item_id``, newest first."""
        ...

    async def insert_comment(self, item_id: str, user_id: str, content: str) -> None:
        """Add a comment to ``item_id``."""
        ...

    async def update_comment(self, comment_id: str, user_id: str, content: str) -> None:
        """Replace the content of a comment written by ``user_id``."""
        ...

    async def delete_comment(self, comment_id: str, user_id: str) -> None:
        """Delete a comment written by ``user_id``."""
        ...

    async def fetch_profile_names(self, user_ids: Iterable[str]) -> dict[str, str]:
        """Return display names keyed by user id."""
        ...

    # --- Events feed ---

    async def fetch_events(self) -> list[Row]:
        """Return all event rows."""
        ...

    async def insert_event(
        self, title: str, event_date: datetime, created_by: str
    ) -> Row:
        """Create an event row and return it."""
        ...

    async def delete_event(self, event_id: str) -> None:
        """Delete an event row."""
        ...
