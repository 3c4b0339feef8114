"""Notifications derived from remote inserts.

Every observed insert produces exactly one in-app notification and, when
device permission is granted, one device notification tagged with the item
id. There is no dedup: two inserts for the same id yield two notifications.
"""

from datetime import UTC, datetime
import logging
import uuid

from .device_notifier import DeviceNotifier
from .exceptions import NotFoundError
from .types import ItemInserted, Notification, NotificationKind

logger = logging.getLogger(__name__)

NEW_ITEM_TITLE = "New Video Added"


class NotificationBridge:
    """Own the in-app notification list and its read state.

    Attributes:
        _device: Device notification collaborator.
        _default_icon: Icon for device notifications of items without a
            thumbnail.
        _notifications: Notifications, newest first.
    """

    def __init__(self, device: DeviceNotifier, default_icon: str = "") -> None:
        self._device = device
        self._default_icon = default_icon
        self._notifications: list[Notification] = []

    def on_inserted(self, event: ItemInserted) -> Notification:
        """Record a notification for an observed insert.

        Args:
            event: The Inserted event seen by the reconciler.

        Returns:
            The new notification.
        """
        item = event.item
        notification = Notification(
            id=str(uuid.uuid4()),
            kind=NotificationKind.NEW_ITEM,
            title=NEW_ITEM_TITLE,
            message=f"{item.title} has been added to the library",
            item_id=item.id,
            created_at=datetime.now(UTC),
        )
        self._notifications.insert(0, notification)
        logger.info(
            "New item notification created.",
            extra={"item_id": item.id, "notification_id": notification.id},
        )

        if self._device.permission_granted:
            self._device.show(
                tag=item.id,
                title=notification.title,
                body=notification.message,
                icon=item.thumbnail or self._default_icon,
            )
        return notification

    def notifications(self) -> list[Notification]:
        """Return all notifications, newest first."""
        return list(self._notifications)

    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if not n.read)

    def get(self, notification_id: str) -> Notification:
        """Return the notification with ``notification_id``.

        Raises:
            NotFoundError: If no such notification exists.
        """
        for notification in self._notifications:
            if notification.id == notification_id:
                return notification
        raise NotFoundError(f"Notification '{notification_id}' not found.")

    def mark_read(self, notification_id: str) -> Notification:
        """Flag one notification as read.

        Raises:
            NotFoundError: If no such notification exists.
        """
        for index, notification in enumerate(self._notifications):
            if notification.id == notification_id:
                updated = notification.model_copy(update={"read": True})
                self._notifications[index] = updated
                return updated
        raise NotFoundError(f"Notification '{notification_id}' not found.")

    def mark_all_read(self) -> int:
        """Flag every notification as read.

        Returns:
            Number of notifications that were unread.
        """
        changed = 0
        for index, notification in enumerate(self._notifications):
            if not notification.read:
                self._notifications[index] = notification.model_copy(
                    update={"read": True}
                )
                changed += 1
        return changed
