"""Parameters of the derived library view."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .category import Category

DEFAULT_PAGE_SIZE = 12


class SortKey(str, Enum):
    """Represent the available orderings of the derived view."""

    NEWEST = "newest"
    OLDEST = "oldest"
    POPULAR = "popular"


class Section(str, Enum):
    """Represent the section of the application the user is looking at.

    Sections restrict which catalog items are eligible for display.
    """

    LIBRARY = "library"
    STUDIES = "studies"
    EVENTS = "events"
    FAVORITES = "favorites"
    DASHBOARD = "dashboard"
    SETTINGS = "settings"


class ViewParameters(BaseModel):
    """Pure inputs to the derived view pipeline.

    Attributes:
        category: Category filter; ``Category.ALL`` matches everything.
        query: Free-text query matched against title or description.
        section: Active section.
        sort: Sort key.
        page: 1-based page number.
        page_size: Items per page.
    """

    model_config = ConfigDict(frozen=True)

    category: Category = Category.ALL
    query: str = ""
    section: Section = Section.LIBRARY
    sort: SortKey = SortKey.NEWEST
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)
