"""Full catalog reload: fetch every row and re-aggregate engagement counts."""

import logging

from .backend import CatalogBackend
from .backend.records import item_from_row
from .exceptions import MalformedRecordError
from .types import CatalogItem, SessionContext

logger = logging.getLogger(__name__)


class CatalogLoader:
    """Build the catalog from the backend.

    Attributes:
        _backend: Backend collaborator.
        _context: Signed-in session, whose likes are looked up.
    """

    def __init__(self, backend: CatalogBackend, context: SessionContext) -> None:
        self._backend = backend
        self._context = context

    async def load(self) -> list[CatalogItem]:
        """Fetch the catalog with like, liked-by-user and comment aggregates.

        Rows that cannot be mapped are logged and skipped.

        Returns:
            Catalog items, newest first as returned by the backend.

        Raises:
            BackendError: If the catalog or an aggregate query fails.
        """
        rows = await self._backend.fetch_catalog()
        item_ids = [str(row["id"]) for row in rows if row.get("id") is not None]

        like_counts = await self._backend.fetch_like_counts(item_ids)
        user_likes = await self._backend.fetch_user_likes(
            self._context.user_id, item_ids
        )
        comment_counts = await self._backend.fetch_comment_counts(item_ids)

        items: list[CatalogItem] = []
        for row in rows:
            item_id = str(row.get("id"))
            try:
                items.append(
                    item_from_row(
                        row,
                        like_count=like_counts.get(item_id, 0),
                        is_liked=item_id in user_likes,
                        comment_count=comment_counts.get(item_id, 0),
                    )
                )
            except MalformedRecordError as e:
                logger.warning(
                    "Skipping malformed catalog row.",
                    extra={"item_id": item_id},
                    exc_info=e,
                )

        logger.info(
            "Catalog loaded.",
            extra={"row_count": len(rows), "item_count": len(items)},
        )
        return items
