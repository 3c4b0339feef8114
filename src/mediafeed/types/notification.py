"""In-app notification model."""

from enum import Enum

from pydantic import AwareDatetime, BaseModel, ConfigDict


class NotificationKind(str, Enum):
    """Represent the kind of an in-app notification."""

    NEW_ITEM = "new_video"


class Notification(BaseModel):
    """Represent one in-app notification.

    Attributes:
        id: Locally generated unique identifier.
        kind: Notification kind.
        title: Short title.
        message: Human-readable message.
        item_id: Catalog item the notification refers to, if any.
        read: Whether the user has read the notification.
        created_at: When the notification was created.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    kind: NotificationKind = NotificationKind.NEW_ITEM
    title: str
    message: str
    item_id: str | None = None
    read: bool = False
    created_at: AwareDatetime
