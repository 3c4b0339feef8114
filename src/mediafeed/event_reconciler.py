"""Remote event reconciliation.

Merges pushed catalog changes into the record store under field-ownership
rules: inserts are idempotent upserts, and updates are applied only when
every changed field is one a remote writer may own (the view count).
"""

from collections.abc import AsyncIterable, Callable
from datetime import UTC, datetime
import logging
from typing import Any

from .record_store import RecordStore
from .types import (
    REMOTE_SAFE_FIELDS,
    CatalogItem,
    ItemInserted,
    ItemUpdated,
    RemoteEvent,
)

logger = logging.getLogger(__name__)

InsertListener = Callable[[ItemInserted], None]


class DetailView:
    """Projection of the item currently open in the detail view.

    Attributes:
        _item: Snapshot of the open item, or None when closed.
        _opened_at: When the detail view was opened.
    """

    def __init__(self) -> None:
        self._item: CatalogItem | None = None
        self._opened_at: datetime | None = None

    @property
    def item(self) -> CatalogItem | None:
        return self._item

    @property
    def opened_at(self) -> datetime | None:
        return self._opened_at

    def is_open_for(self, item_id: str) -> bool:
        return self._item is not None and self._item.id == item_id

    def open(self, item: CatalogItem) -> None:
        self._item = item
        self._opened_at = datetime.now(UTC)
        logger.debug("Detail view opened.", extra={"item_id": item.id})

    def refresh(self, item: CatalogItem) -> bool:
        """Replace the open snapshot without reopening the view.

        Returns:
            True if the view was open for ``item`` and was refreshed.
        """
        if not self.is_open_for(item.id):
            return False
        self._item = item
        return True

    def close(self) -> None:
        self._item = None
        self._opened_at = None


class RemoteEventReconciler:
    """Apply remote events to the record store one at a time.

    Attributes:
        _store: The canonical record store.
        _detail: The open detail projection to keep current.
        _insert_listeners: Callbacks invoked for every observed insert.
    """

    def __init__(self, store: RecordStore, detail: DetailView) -> None:
        self._store = store
        self._detail = detail
        self._insert_listeners: list[InsertListener] = []

    def add_insert_listener(self, listener: InsertListener) -> None:
        """Register ``listener`` to observe every Inserted event."""
        self._insert_listeners.append(listener)

    def apply(self, event: RemoteEvent) -> bool:
        """Merge one remote event into the store.

        Args:
            event: The event to apply.

        Returns:
            True if the store changed.

        Raises:
            ValueError: If an update would produce an invalid item; the store
                is left unchanged.
        """
        match event:
            case ItemInserted(item=item):
                inserted = self._store.upsert(item)
                logger.debug(
                    "Remote insert reconciled.",
                    extra={"item_id": item.id, "inserted": inserted},
                )
                for listener in self._insert_listeners:
                    listener(event)
                return inserted
            case ItemUpdated(item_id=item_id, fields=fields):
                return self._apply_update(item_id, fields)

    def _apply_update(self, item_id: str, fields: dict[str, Any]) -> bool:
        log_params = {"item_id": item_id, "fields": sorted(fields)}
        if not fields:
            logger.debug("Remote update without changes ignored.", extra=log_params)
            return False
        if not set(fields) <= REMOTE_SAFE_FIELDS:
            logger.debug(
                "Remote update touches locally owned fields; ignored.",
                extra=log_params,
            )
            return False

        patched = self._store.patch(item_id, dict(fields))
        if patched is None:
            return False
        if self._detail.refresh(patched):
            logger.debug("Open detail view refreshed.", extra=log_params)
        return True

    async def run(self, events: AsyncIterable[RemoteEvent]) -> None:
        """Consume ``events`` until the sequence ends or the task is cancelled.

        A failure applying one event is logged and does not stop the loop.
        """
        logger.info("Remote event reconciler started.")
        async for event in events:
            try:
                self.apply(event)
            except Exception as e:
                logger.error(
                    "Failed to apply remote event; continuing.",
                    extra={
                        "event_type": type(event).__name__,
                        "item_id": event.item_id,
                    },
                    exc_info=e,
                )
        logger.info("Remote event stream ended.")
