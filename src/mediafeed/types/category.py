"""Catalog categories."""

from enum import Enum


class Category(str, Enum):
    """Represent the category of a catalog item.

    ``ALL`` is a filter value only; no catalog item carries it.
    """

    ALL = "All"
    SERMONS = "Sermons"
    HYMNS = "Hymns"
    LITURGIES = "Liturgies"
    BIBLE_STUDY = "Bible Study"
    KIDS = "Kids"
    EVENTS = "Events"

    def __str__(self) -> str:
        return self.value


ITEM_CATEGORIES: tuple[Category, ...] = tuple(
    c for c in Category if c is not Category.ALL
)
