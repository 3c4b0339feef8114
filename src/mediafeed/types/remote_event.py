"""Remote change events pushed by the backend."""

from dataclasses import dataclass, field
from typing import Any

from .catalog_item import CatalogItem


@dataclass(frozen=True)
class ItemInserted:
    """A catalog row was inserted on the backend.

    Attributes:
        item: Snapshot of the inserted item.
    """

    item: CatalogItem

    @property
    def item_id(self) -> str:
        """Identifier of the inserted item."""
        return self.item.id


@dataclass(frozen=True)
class ItemUpdated:
    """A catalog row was updated on the backend.

    Attributes:
        item_id: Identifier of the updated item.
        fields: The changed fields only, keyed by CatalogItem field name.
    """

    item_id: str
    fields: dict[str, Any] = field(default_factory=dict[str, Any])


RemoteEvent = ItemInserted | ItemUpdated
