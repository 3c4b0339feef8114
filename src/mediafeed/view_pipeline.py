"""Derived view pipeline: filter, then sort, then paginate.

The pipeline functions are pure: the same store snapshot, favorite set and
view parameters always produce the same page. :class:`ViewState` holds the
view parameters between derivations and applies the page reset rules.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import logging
import math
from typing import Any

from .types import CatalogItem, Category, Section, SortKey, ViewParameters

logger = logging.getLogger(__name__)

_SECTION_CATEGORY: dict[Section, Category] = {
    Section.STUDIES: Category.BIBLE_STUDY,
    Section.EVENTS: Category.EVENTS,
}

# Sections that show no catalog items at all
_ITEMLESS_SECTIONS = frozenset({Section.DASHBOARD, Section.SETTINGS})


@dataclass(frozen=True)
class DerivedView:
    """One derived page of the catalog.

    Attributes:
        items: Items on the current page, in display order.
        page: The (clamped) 1-based page number.
        total_pages: Number of pages; 0 when nothing matches.
        total_items: Number of items matching the filters.
    """

    items: tuple[CatalogItem, ...]
    page: int
    total_pages: int
    total_items: int


def _matches_section(
    item: CatalogItem, section: Section, favorites: frozenset[str]
) -> bool:
    if section in _ITEMLESS_SECTIONS:
        return False
    if section is Section.FAVORITES:
        return item.id in favorites
    required = _SECTION_CATEGORY.get(section)
    return required is None or item.category is required


def _matches_query(item: CatalogItem, query: str) -> bool:
    if not query:
        return True
    needle = query.casefold()
    return needle in item.title.casefold() or needle in item.description.casefold()


def filter_items(
    items: Iterable[CatalogItem],
    params: ViewParameters,
    favorites: frozenset[str] = frozenset(),
) -> list[CatalogItem]:
    """Keep the items matching the category, query and section filters.

    Store order is preserved.
    """
    return [
        item
        for item in items
        if (params.category is Category.ALL or item.category is params.category)
        and _matches_query(item, params.query)
        and _matches_section(item, params.section, favorites)
    ]


def sort_items(items: Iterable[CatalogItem], sort: SortKey) -> list[CatalogItem]:
    """Stable sort by ``sort``; ties keep their incoming (store) order."""
    match sort:
        case SortKey.NEWEST:
            return sorted(items, key=lambda i: i.created_at, reverse=True)
        case SortKey.OLDEST:
            return sorted(items, key=lambda i: i.created_at)
        case SortKey.POPULAR:
            return sorted(items, key=lambda i: i.views, reverse=True)


def total_pages(total_items: int, page_size: int) -> int:
    return math.ceil(total_items / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Clamp ``page`` into ``[1, max(pages, 1)]``."""
    return min(max(page, 1), max(pages, 1))


def paginate(items: Sequence[CatalogItem], page: int, page_size: int) -> DerivedView:
    """Slice one page out of ``items``.

    Args:
        items: Filtered and sorted items.
        page: Requested 1-based page; out-of-range values are clamped.
        page_size: Items per page.

    Returns:
        The derived page.
    """
    pages = total_pages(len(items), page_size)
    current = clamp_page(page, pages)
    start = (current - 1) * page_size
    return DerivedView(
        items=tuple(items[start : start + page_size]),
        page=current,
        total_pages=pages,
        total_items=len(items),
    )


def derive_view(
    items: Iterable[CatalogItem],
    params: ViewParameters,
    favorites: frozenset[str] = frozenset(),
) -> DerivedView:
    """Run the whole pipeline over a store snapshot."""
    filtered = filter_items(items, params, favorites)
    return paginate(sort_items(filtered, params.sort), params.page, params.page_size)


class ViewState:
    """Hold the view parameters and apply the page reset rules.

    The page returns to 1 when a filter or the sort key changes, and when
    the set of items matching the filters changes (an item added, deleted,
    or leaving the favorites section). Updates that only change values
    within the matching set, such as a view count, keep the page.

    Attributes:
        _params: Current view parameters.
        _membership: Ids matching the filters at the last derivation.
    """

    def __init__(self, page_size: int) -> None:
        self._params = ViewParameters(page_size=page_size)
        self._membership: frozenset[str] | None = None

    @property
    def params(self) -> ViewParameters:
        return self._params

    def update(self, **changes: Any) -> ViewParameters:
        """Change the category, query, section or sort key.

        Args:
            **changes: New values keyed by ViewParameters field name; ``page``
                and ``page_size`` are not accepted.

        Returns:
            The new view parameters.

        Raises:
            ValueError: If a field is unknown, not changeable this way, or
                invalid.
        """
        allowed = {"category", "query", "section", "sort"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Cannot change view parameters: {sorted(unknown)}")

        updated = ViewParameters.model_validate(
            {**self._params.model_dump(), **changes}
        )
        if updated != self._params:
            updated = updated.model_copy(update={"page": 1})
            self._membership = None
            logger.debug(
                "View parameters changed; page reset.",
                extra={"changes": sorted(changes)},
            )
        self._params = updated
        return updated

    def set_page(self, page: int) -> ViewParameters:
        """Request ``page``; it is clamped at the next derivation.

        Raises:
            ValueError: If ``page`` is lower than 1.
        """
        self._params = ViewParameters.model_validate(
            {**self._params.model_dump(), "page": page}
        )
        return self._params

    def derive(
        self, items: Iterable[CatalogItem], favorites: frozenset[str] = frozenset()
    ) -> DerivedView:
        """Derive the current page, resetting to page 1 on a membership change."""
        filtered = filter_items(items, self._params, favorites)
        membership = frozenset(item.id for item in filtered)
        if (
            self._membership is not None
            and membership != self._membership
            and self._params.page != 1
        ):
            logger.debug("Matching items changed; page reset.")
            self._params = self._params.model_copy(update={"page": 1})
        self._membership = membership

        view = paginate(
            sort_items(filtered, self._params.sort),
            self._params.page,
            self._params.page_size,
        )
        if view.page != self._params.page:
            self._params = self._params.model_copy(update={"page": view.page})
        return view
