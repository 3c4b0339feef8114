"""Local mutations with immediate effect on the record store.

Play and like/unlike are optimistic: the store changes before the backend
call is even sent, and a failed call is logged without rolling back. Add
and delete wait for the backend and only then touch the store.
"""

import asyncio
from collections.abc import Coroutine
import logging
from typing import Any

from .backend import CatalogBackend
from .backend.records import item_from_row
from .exceptions import (
    BackendError,
    ItemCreateError,
    ItemDeleteError,
    MalformedRecordError,
)
from .favorites import FavoriteSet
from .record_store import RecordStore
from .types import CatalogItem, ItemDraft, SessionContext

logger = logging.getLogger(__name__)


class MutationApplier:
    """Apply user commands to the record store and the backend.

    Attributes:
        _store: The canonical record store.
        _backend: Backend collaborator.
        _favorites: The favorite set.
        _context: Signed-in session.
        _pending: Fire-and-forget backend calls still running.
    """

    def __init__(
        self,
        store: RecordStore,
        backend: CatalogBackend,
        favorites: FavoriteSet,
        context: SessionContext,
    ) -> None:
        self._store = store
        self._backend = backend
        self._favorites = favorites
        self._context = context
        self._pending: set[asyncio.Task[None]] = set()

    def _task_done_callback(self, operation: str, item_id: str):
        """Create a callback that logs a failed fire-and-forget call.

        Args:
            operation: Name of the backend operation.
            item_id: Catalog item the call was about.

        Returns:
            Function suitable for :meth:`asyncio.Task.add_done_callback`.
        """

        def _callback(task: asyncio.Task[None]) -> None:
            self._pending.discard(task)
            log_params = {"operation": operation, "item_id": item_id}
            if task.cancelled():
                logger.warning("Backend call cancelled.", extra=log_params)
                return
            exc = task.exception()
            if exc:
                logger.error(
                    "Backend call failed; local change kept.",
                    extra=log_params,
                    exc_info=exc,
                )

        return _callback

    def _fire_and_forget(
        self, coro: Coroutine[Any, Any, None], operation: str, item_id: str
    ) -> None:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._task_done_callback(operation, item_id))

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def wait_pending(self) -> None:
        """Wait for all fire-and-forget calls to settle; failures are logged."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def play(self, item_id: str) -> CatalogItem | None:
        """Count a view of ``item_id`` now and persist it in the background.

        Returns:
            The updated item, or None if the id is not in the store.
        """
        item = self._store.get_item(item_id)
        if item is None:
            logger.debug("Play for unknown item ignored.", extra={"item_id": item_id})
            return None

        updated = self._store.patch(item_id, {"views": item.views + 1})
        self._fire_and_forget(
            self._backend.increment_views(item_id), "increment views", item_id
        )
        return updated

    def toggle_like(self, item_id: str) -> CatalogItem | None:
        """Flip the like of the signed-in user on ``item_id``.

        The like count moves by one and never drops below zero.

        Returns:
            The updated item, or None if the id is not in the store.
        """
        item = self._store.get_item(item_id)
        if item is None:
            logger.debug("Like for unknown item ignored.", extra={"item_id": item_id})
            return None

        if item.is_liked:
            fields = {"is_liked": False, "like_count": max(0, item.like_count - 1)}
            call = self._backend.unlike_item(item_id, self._context.user_id)
            operation = "unlike item"
        else:
            fields = {"is_liked": True, "like_count": item.like_count + 1}
            call = self._backend.like_item(item_id, self._context.user_id)
            operation = "like item"

        updated = self._store.patch(item_id, fields)
        self._fire_and_forget(call, operation, item_id)
        return updated

    async def toggle_favorite(self, item_id: str) -> bool:
        """Flip the favorite state of ``item_id``; the store is not touched.

        Returns:
            True if the item is a favorite after the call.
        """
        return await self._favorites.toggle(item_id)

    async def add_item(self, draft: ItemDraft) -> CatalogItem:
        """Create an item on the backend, then insert it into the store.

        If the reconciler already inserted the same id, the store keeps that
        record.

        Args:
            draft: Admin-supplied fields.

        Returns:
            The item as stored.

        Raises:
            ItemCreateError: If the backend call fails or returns an unusable
                row; the store is unchanged.
        """
        try:
            row = await self._backend.insert_item(draft, self._context.user_id)
            item = item_from_row(row)
        except (BackendError, MalformedRecordError) as e:
            raise ItemCreateError(
                "Failed to add media item.", title=draft.title
            ) from e

        self._store.upsert(item)
        logger.info(
            "Catalog item added.", extra={"item_id": item.id, "title": item.title}
        )
        return self._store.get_item(item.id) or item

    async def delete_item(self, item_id: str) -> None:
        """Delete an item on the backend, then remove it from the store.

        Raises:
            ItemDeleteError: If the backend call fails; the store is
                unchanged.
        """
        try:
            await self._backend.delete_item(item_id)
        except BackendError as e:
            raise ItemDeleteError(
                "Failed to delete media item.", item_id=item_id
            ) from e

        self._store.remove(item_id)
        logger.info("Catalog item deleted.", extra={"item_id": item_id})
