"""Favorite set with durable local storage.

Favorites are keyed by catalog item id and live independently of the
record store: a favorite survives its item being removed and reappearing.
"""

import logging

from .db import FavoritesDatabase
from .exceptions import DatabaseOperationError

logger = logging.getLogger(__name__)


class FavoriteSet:
    """In-memory favorite set backed by the favorites database.

    The in-memory set is authoritative for the session. A failed write is
    logged and the in-memory change is kept.

    Attributes:
        _db: Database access for favorites.
        _ids: Favorite item ids.
    """

    def __init__(self, favorites_db: FavoritesDatabase) -> None:
        self._db = favorites_db
        self._ids: set[str] = set()

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def ids(self) -> frozenset[str]:
        """Return a snapshot of the favorite ids."""
        return frozenset(self._ids)

    async def load(self) -> None:
        """Load the persisted favorites into memory.

        Raises:
            DatabaseOperationError: If the favorites cannot be read.
        """
        self._ids = await self._db.get_favorite_ids()
        logger.info("Favorites loaded.", extra={"count": len(self._ids)})

    async def toggle(self, item_id: str) -> bool:
        """Flip the favorite state of ``item_id``.

        Args:
            item_id: Catalog item identifier; it need not be in the store.

        Returns:
            True if the item is a favorite after the call.
        """
        log_params = {"item_id": item_id}
        if item_id in self._ids:
            self._ids.discard(item_id)
            now_favorite = False
        else:
            self._ids.add(item_id)
            now_favorite = True

        try:
            if now_favorite:
                await self._db.add_favorite(item_id)
            else:
                await self._db.remove_favorite(item_id)
        except DatabaseOperationError as e:
            logger.error(
                "Failed to persist favorite change; keeping in-memory state.",
                extra={**log_params, "favorite": now_favorite},
                exc_info=e,
            )
        else:
            logger.debug(
                "Favorite toggled.", extra={**log_params, "favorite": now_favorite}
            )
        return now_favorite
