# pyright: reportUnknownVariableType=false, reportUnknownMemberType=false

"""Favorite table mapped with SQLModel."""

from datetime import datetime

from sqlalchemy import Column, text
from sqlmodel import Field, SQLModel

from .timezone_aware_datetime import SQLITE_DATETIME_NOW, TimezoneAwareDatetime


class Favorite(SQLModel, table=True):
    """Represent one catalog item the user marked as a favorite.

    Rows are keyed by item id only and are never cascaded from the catalog:
    a favorite survives its item disappearing and reappearing.

    Attributes:
        item_id: Catalog item identifier.
        added_at: When the item was marked as a favorite (UTC).
    """

    item_id: str = Field(primary_key=True)
    added_at: datetime | None = Field(
        default=None,
        sa_column=Column(
            TimezoneAwareDatetime,
            nullable=False,
            server_default=text(f"({SQLITE_DATETIME_NOW})"),
        ),
    )
