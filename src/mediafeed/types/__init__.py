"""Domain model types."""

from .catalog_item import (
    LOCALLY_OWNED_FIELDS,
    REMOTE_SAFE_FIELDS,
    CatalogItem,
    ItemDraft,
)
from .category import ITEM_CATEGORIES, Category
from .comment import Comment
from .event_entry import EventEntry
from .notification import Notification, NotificationKind
from .remote_event import ItemInserted, ItemUpdated, RemoteEvent
from .session_context import SessionContext
from .view_params import DEFAULT_PAGE_SIZE, Section, SortKey, ViewParameters

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "ITEM_CATEGORIES",
    "LOCALLY_OWNED_FIELDS",
    "REMOTE_SAFE_FIELDS",
    "CatalogItem",
    "Category",
    "Comment",
    "EventEntry",
    "ItemDraft",
    "ItemInserted",
    "ItemUpdated",
    "Notification",
    "NotificationKind",
    "RemoteEvent",
    "Section",
    "SessionContext",
    "SortKey",
    "ViewParameters",
]
