"""Catalog filtering: category plus free-text query over the fixed catalog."""
from __future__ import annotations

from collections.abc import Iterable

from shopfront.core.constants import ALL_ITEMS_HEADING
from shopfront.domain.catalog import CatalogItem, Category


def _matches_query(item: CatalogItem, needle: str) -> bool:
    haystacks = (item.title, item.description, item.category.value if item.category else "")
    return any(needle in text.casefold() for text in haystacks)


def filter_catalog(
    catalog: Iterable[CatalogItem],
    category: Category | str | None = None,
    query: str | None = "",
) -> list[CatalogItem]:
    """Return catalog items matching both filters, in catalog order.

    Args:
        catalog: Items in display order
        category: Exact category to keep, or None for all categories
        query: Case-insensitive substring of title, description or category;
            empty or whitespace-only matches everything
    """
    needle = (query or "").strip().casefold()
    wanted = category.value if isinstance(category, Category) else category

    result = []
    for item in catalog:
        if wanted is not None and (item.category is None or item.category.value != wanted):
            continue
        if needle and not _matches_query(item, needle):
            continue
        result.append(item)
    return result


def parse_category(value: str | None) -> Category | None:
    """Tolerant string to category; unknown or empty values mean all categories."""
    if not value:
        return None
    try:
        return Category(value.strip().lower())
    except ValueError:
        return None


def category_title(category: Category | None) -> str:
    return category.label if category else ALL_ITEMS_HEADING
