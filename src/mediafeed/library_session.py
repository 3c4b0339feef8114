"""Library engine facade for the presentation layer.

A LibrarySession owns one record store and wires the mutation applier,
the remote event reconciler, the notification bridge and the derived view
state around it. Every public command and read the presentation layer needs
goes through this class.
"""

import asyncio
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from .backend import CatalogBackend
from .backend.records import comment_from_row
from .catalog_loader import CatalogLoader
from .db import FavoritesDatabase
from .device_notifier import DeviceNotifier
from .event_channel import EventChannel
from .event_reconciler import DetailView, RemoteEventReconciler
from .events_feed import EventsFeed
from .exceptions import (
    BackendError,
    CommentError,
    DatabaseOperationError,
    MalformedRecordError,
    NotFoundError,
)
from .favorites import FavoriteSet
from .logging_config import set_context_id
from .mutation_applier import MutationApplier
from .notification_bridge import NotificationBridge
from .record_store import RecordStore
from .types import (
    DEFAULT_PAGE_SIZE,
    CatalogItem,
    Category,
    Comment,
    ItemDraft,
    Notification,
    Section,
    SessionContext,
    ViewParameters,
)
from .view_pipeline import DerivedView, ViewState

logger = logging.getLogger(__name__)


class LibraryStats(BaseModel):
    """Catalog totals shown on the admin dashboard.

    Attributes:
        item_count: Number of catalog items.
        total_views: Sum of view counts.
        focus_category: The category filter currently selected.
    """

    model_config = ConfigDict(frozen=True)

    item_count: int
    total_views: int
    focus_category: Category


class LibrarySession:
    """One signed-in user's view of the media library.

    Attributes:
        context: The signed-in session.
        store: Canonical record store.
        detail: The open detail projection.
        favorites: Favorite set.
        events: Secondary events feed.
        channel: Remote change subscription consumed by the reconciler.
    """

    def __init__(
        self,
        backend: CatalogBackend,
        favorites_db: FavoritesDatabase,
        device: DeviceNotifier,
        context: SessionContext,
        page_size: int = DEFAULT_PAGE_SIZE,
        notification_icon: str = "",
    ) -> None:
        self.context = context
        self._backend = backend
        self._device = device

        self.store = RecordStore()
        self.detail = DetailView()
        self.favorites = FavoriteSet(favorites_db)
        self.events = EventsFeed(backend, context)
        self.channel = EventChannel()

        self._loader = CatalogLoader(backend, context)
        self._applier = MutationApplier(self.store, backend, self.favorites, context)
        self._reconciler = RemoteEventReconciler(self.store, self.detail)
        self._bridge = NotificationBridge(device, notification_icon)
        self._reconciler.add_insert_listener(self._bridge.on_inserted)
        self._view = ViewState(page_size)

        self._reconciler_task: asyncio.Task[None] | None = None
        logger.debug(
            "LibrarySession initialized.",
            extra={"user_id": context.user_id, "role": context.role},
        )

    # --- Lifecycle ---

    async def start(self) -> None:
        """Load local and remote state, then start consuming remote events.

        Load failures are logged and leave the affected state empty; the
        session still starts.
        """
        set_context_id(f"session-{self.context.user_id}")
        self._device.request_permission()

        try:
            await self.favorites.load()
        except DatabaseOperationError as e:
            logger.error("Failed to load favorites.", exc_info=e)

        try:
            await self.reload()
        except BackendError as e:
            logger.error("Initial catalog load failed.", exc_info=e)

        try:
            await self.events.load()
        except BackendError as e:
            logger.error("Initial events feed load failed.", exc_info=e)

        self._reconciler_task = asyncio.create_task(
            self._reconciler.run(self.channel)
        )
        logger.info("Library session started.", extra={"item_count": len(self.store)})

    async def stop(self) -> None:
        """Cancel the subscription and let pending backend calls finish."""
        self.channel.close()
        if self._reconciler_task is not None:
            self._reconciler_task.cancel()
            await asyncio.gather(self._reconciler_task, return_exceptions=True)
            self._reconciler_task = None
        await self._applier.wait_pending()
        logger.info("Library session stopped.")

    async def wait_pending(self) -> None:
        """Wait for fire-and-forget backend calls to settle."""
        await self._applier.wait_pending()

    async def reload(self) -> int:
        """Re-fetch the catalog and re-aggregate likes and comments.

        Items inserted while the fetch was in flight are kept ahead of the
        loaded rows, and items removed meanwhile stay removed.

        Returns:
            Number of items loaded.

        Raises:
            BackendError: If the catalog cannot be fetched; the store is
                unchanged.
        """
        before = {item.id for item in self.store.get()}
        items = await self._loader.load()

        current = self.store.get()
        current_ids = {item.id for item in current}
        loaded_ids = {item.id for item in items}
        removed = before - current_ids
        inserted = [
            item
            for item in current
            if item.id not in before and item.id not in loaded_ids
        ]
        if inserted or removed:
            logger.debug(
                "Store changed during reload; merging.",
                extra={"inserted": len(inserted), "removed": len(removed)},
            )
        self.store.replace_all(
            [*inserted, *(item for item in items if item.id not in removed)]
        )
        if self.detail.item is not None:
            shown = self.store.get_item(self.detail.item.id)
            if shown is None:
                self.detail.close()
            else:
                self.detail.refresh(shown)
        return len(items)

    def ingest_change(self, payload: dict[str, Any]) -> bool:
        """Feed one realtime change payload into the subscription.

        Returns:
            True if the payload was accepted.
        """
        return self.channel.publish_payload(payload)

    # --- Derived view ---

    @property
    def view_parameters(self) -> ViewParameters:
        return self._view.params

    def current_view(self) -> DerivedView:
        return self._view.derive(self.store.get(), self.favorites.ids())

    def current_page(self) -> tuple[CatalogItem, ...]:
        return self.current_view().items

    def total_pages(self) -> int:
        return self.current_view().total_pages

    def update_view(self, **changes: Any) -> ViewParameters:
        """Change category, query, section or sort; the page resets to 1."""
        return self._view.update(**changes)

    def set_page(self, page: int) -> DerivedView:
        """Move to ``page`` (clamped) and return the derived page."""
        self._view.set_page(page)
        return self.current_view()

    def stats(self) -> LibraryStats:
        return LibraryStats(
            item_count=len(self.store),
            total_views=self.store.total_views(),
            focus_category=self._view.params.category,
        )

    # --- Item commands ---

    def get_item(self, item_id: str) -> CatalogItem:
        """Return the item with ``item_id``.

        Raises:
            NotFoundError: If the item is not in the store.
        """
        item = self.store.get_item(item_id)
        if item is None:
            raise NotFoundError(f"Catalog item '{item_id}' not found.")
        return item

    def play(self, item_id: str) -> CatalogItem:
        """Count a view and open the item in the detail view.

        Raises:
            NotFoundError: If the item is not in the store.
        """
        item = self._applier.play(item_id)
        if item is None:
            raise NotFoundError(f"Catalog item '{item_id}' not found.")
        self.detail.open(item)
        return item

    def toggle_like(self, item_id: str) -> CatalogItem:
        """Flip the signed-in user's like.

        Raises:
            NotFoundError: If the item is not in the store.
        """
        item = self._applier.toggle_like(item_id)
        if item is None:
            raise NotFoundError(f"Catalog item '{item_id}' not found.")
        self.detail.refresh(item)
        return item

    async def toggle_favorite(self, item_id: str) -> bool:
        return await self._applier.toggle_favorite(item_id)

    async def add_item(self, draft: ItemDraft) -> CatalogItem:
        """Create a catalog item.

        Raises:
            ItemCreateError: If the backend call fails.
        """
        return await self._applier.add_item(draft)

    async def delete_item(self, item_id: str) -> None:
        """Delete a catalog item and close its detail view if open.

        Raises:
            ItemDeleteError: If the backend call fails.
        """
        await self._applier.delete_item(item_id)
        if self.detail.is_open_for(item_id):
            self.detail.close()

    def close_detail(self) -> None:
        self.detail.close()

    # --- Notifications ---

    def notifications(self) -> list[Notification]:
        return self._bridge.notifications()

    def unread_count(self) -> int:
        return self._bridge.unread_count()

    def mark_read(self, notification_id: str) -> Notification:
        """Flag one notification as read.

        Raises:
            NotFoundError: If the notification does not exist.
        """
        return self._bridge.mark_read(notification_id)

    def mark_all_read(self) -> int:
        return self._bridge.mark_all_read()

    def open_notification(self, notification_id: str) -> CatalogItem | None:
        """Handle a click on a notification.

        The notification is marked read. If its item is in the store, the
        library section is shown and the item is played; otherwise nothing
        else happens.

        Returns:
            The played item, or None if there was nothing to play.

        Raises:
            NotFoundError: If the notification does not exist.
        """
        notification = self._bridge.get(notification_id)
        if not notification.read:
            self._bridge.mark_read(notification_id)

        item_id = notification.item_id
        if item_id is None or item_id not in self.store:
            logger.debug(
                "Notification item not in catalog; click ignored.",
                extra={"notification_id": notification_id, "item_id": item_id},
            )
            return None

        if self._view.params.section is not Section.LIBRARY:
            self._view.update(section=Section.LIBRARY)
        return self.play(item_id)

    # --- Comments ---

    async def comments(self, item_id: str) -> list[Comment]:
        """Return the comments on ``item_id``, newest first, with author names.

        Raises:
            CommentError: If the comments cannot be fetched.
        """
        try:
            rows = await self._backend.fetch_comments(item_id)
            user_ids = {str(row["user_id"]) for row in rows if "user_id" in row}
            names = await self._backend.fetch_profile_names(user_ids)
        except BackendError as e:
            raise CommentError("Failed to load comments.", item_id=item_id) from e

        comments: list[Comment] = []
        for row in rows:
            try:
                comments.append(
                    comment_from_row(row, names.get(str(row.get("user_id"))))
                )
            except MalformedRecordError as e:
                logger.warning(
                    "Skipping malformed comment row.",
                    extra={"item_id": item_id, "comment_id": row.get("id")},
                    exc_info=e,
                )
        return comments

    async def add_comment(self, item_id: str, content: str) -> None:
        """Post a comment as the signed-in user.

        Raises:
            CommentError: If the content is blank or the backend call fails.
        """
        text = content.strip()
        if not text:
            raise CommentError("Comment content is empty.", item_id=item_id)
        try:
            await self._backend.insert_comment(item_id, self.context.user_id, text)
        except BackendError as e:
            raise CommentError("Failed to add comment.", item_id=item_id) from e

    async def update_comment(self, comment_id: str, content: str) -> None:
        """Edit a comment written by the signed-in user.

        Raises:
            CommentError: If the content is blank or the backend call fails.
        """
        text = content.strip()
        if not text:
            raise CommentError("Comment content is empty.", comment_id=comment_id)
        try:
            await self._backend.update_comment(comment_id, self.context.user_id, text)
        except BackendError as e:
            raise CommentError(
                "Failed to update comment.", comment_id=comment_id
            ) from e

    async def delete_comment(self, comment_id: str) -> None:
        """Delete a comment written by the signed-in user.

        Raises:
            CommentError: If the backend call fails.
        """
        try:
            await self._backend.delete_comment(comment_id, self.context.user_id)
        except BackendError as e:
            raise CommentError(
                "Failed to delete comment.", comment_id=comment_id
            ) from e

    async def close_comments(self, item_id: str) -> bool:
        """End the comment view of ``item_id`` and refresh the aggregates.

        Returns:
            True if the full reload succeeded.
        """
        try:
            await self.reload()
        except BackendError as e:
            logger.error(
                "Reload after closing comments failed.",
                extra={"item_id": item_id},
                exc_info=e,
            )
            return False
        return True
