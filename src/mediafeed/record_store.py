"""Canonical in-memory catalog.

The RecordStore holds at most one CatalogItem per id. It is written by the
MutationApplier and the RemoteEventReconciler and read by the derived view
pipeline; all of them run on the same event loop, so no locking is needed.
"""

from collections.abc import Iterable
import logging
from typing import Any

from .types import CatalogItem

logger = logging.getLogger(__name__)


class RecordStore:
    """Hold the canonical set of catalog items.

    Items are kept newest-insert-first: ``upsert`` prepends. That order is
    only used as the tie-break of the derived view's stable sort.

    Attributes:
        _items: Items keyed by id.
        _order: Item ids in store order.
    """

    def __init__(self, items: Iterable[CatalogItem] = ()) -> None:
        self._items: dict[str, CatalogItem] = {}
        self._order: list[str] = []
        self.replace_all(items)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def get(self) -> tuple[CatalogItem, ...]:
        """Return a snapshot of all items in store order."""
        return tuple(self._items[item_id] for item_id in self._order)

    def get_item(self, item_id: str) -> CatalogItem | None:
        """Return the item with ``item_id``, or None if absent."""
        return self._items.get(item_id)

    def upsert(self, item: CatalogItem) -> bool:
        """Insert ``item`` unless its id is already present.

        An existing record is left untouched, including its like, comment
        and view counts; the call only confirms presence.

        Args:
            item: Item to insert.

        Returns:
            True if the item was inserted, False if the id already existed.
        """
        if item.id in self._items:
            logger.debug(
                "Item already present; insert is a no-op.",
                extra={"item_id": item.id},
            )
            return False

        self._items[item.id] = item
        self._order.insert(0, item.id)
        logger.debug("Item inserted into store.", extra={"item_id": item.id})
        return True

    def patch(self, item_id: str, fields: dict[str, Any]) -> CatalogItem | None:
        """Apply a partial field set to an existing item.

        Fields absent from ``fields`` are left untouched. Patching an id that
        is not in the store is a no-op.

        Args:
            item_id: Identifier of the item to patch.
            fields: Fields to overwrite.

        Returns:
            The patched item, or None if the id is not in the store.

        Raises:
            ValueError: If the patched item fails validation (for example a
                negative count); the stored item is left unchanged.
        """
        current = self._items.get(item_id)
        if current is None:
            logger.debug(
                "Patch for unknown item ignored.",
                extra={"item_id": item_id, "fields": sorted(fields)},
            )
            return None

        patched = current.with_fields(fields)
        self._items[item_id] = patched
        return patched

    def remove(self, item_id: str) -> bool:
        """Remove the item with ``item_id``.

        Returns:
            True if an item was removed, False if the id was not present.
        """
        if self._items.pop(item_id, None) is None:
            return False
        self._order.remove(item_id)
        logger.debug("Item removed from store.", extra={"item_id": item_id})
        return True

    def replace_all(self, items: Iterable[CatalogItem]) -> None:
        """Replace the whole catalog with ``items``, keeping their order.

        Used by the full reload. Duplicate ids keep their first occurrence.

        Args:
            items: Items in the desired store order.
        """
        new_items: dict[str, CatalogItem] = {}
        new_order: list[str] = []
        for item in items:
            if item.id in new_items:
                logger.warning(
                    "Duplicate item id in catalog load; keeping first.",
                    extra={"item_id": item.id},
                )
                continue
            new_items[item.id] = item
            new_order.append(item.id)
        self._items = new_items
        self._order = new_order

    def total_views(self) -> int:
        """Return the sum of view counts across the catalog."""
        return sum(item.views for item in self._items.values())
