"""Filtering and sorting over a merged catalog snapshot."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Sequence

from catalog_manager.catalog.errors import QueryCancelledError
from catalog_manager.catalog.models import CatalogItem

ALL_CATEGORIES = "All"

# Items filtered between cancellation checks.
_CANCEL_CHECK_EVERY = 256


@dataclass(frozen=True, slots=True)
class ItemFilter:
    category: str = ALL_CATEGORIES
    search_text: str = ""
    price_min: int | None = None
    price_max: int | None = None

    def _matches_category(self, item: CatalogItem) -> bool:
        if not self.category or self.category == ALL_CATEGORIES:
            return True
        return item.category.name == self.category

    def _matches_text(self, item: CatalogItem) -> bool:
        needle = (self.search_text or "").strip().lower()
        if not needle:
            return True
        if needle in item.title.lower():
            return True
        if needle in str(item.sku_id):
            return True
        return any(needle in str(ref) for ref in item.prototype_refs)

    def _matches_price(self, item: CatalogItem) -> bool:
        if self.price_min is None and self.price_max is None:
            return True
        for localization in item.localizations:
            price = localization.price
            if self.price_min is not None and price < self.price_min:
                continue
            if self.price_max is not None and price > self.price_max:
                continue
            return True
        return False

    def matches(self, item: CatalogItem) -> bool:
        return self._matches_category(item) and self._matches_text(item) and self._matches_price(item)


async def filter_items(
    items: Sequence[CatalogItem],
    item_filter: ItemFilter,
    *,
    cancel: asyncio.Event | None = None,
) -> List[CatalogItem]:
    """Filter ``items``, yielding to the loop and honouring ``cancel`` between chunks."""

    selected: List[CatalogItem] = []
    for start in range(0, len(items), _CANCEL_CHECK_EVERY):
        if cancel is not None and cancel.is_set():
            raise QueryCancelledError("catalog query cancelled")
        chunk = items[start : start + _CANCEL_CHECK_EVERY]
        selected.extend(item for item in chunk if item_filter.matches(item))
        if start + _CANCEL_CHECK_EVERY < len(items):
            await asyncio.sleep(0)
    if cancel is not None and cancel.is_set():
        raise QueryCancelledError("catalog query cancelled")
    return selected


def _price_key(item: CatalogItem) -> int:
    price = item.price
    return price if price is not None else 0


SORT_KEYS: Dict[str, Callable[[CatalogItem], object]] = {
    "sku": lambda item: item.sku_id,
    "title": lambda item: item.title.lower(),
    "category": lambda item: item.category.name,
    "price": _price_key,
}


def sort_items(items: Iterable[CatalogItem], sort_by: str, *, descending: bool = False) -> List[CatalogItem]:
    try:
        key = SORT_KEYS[sort_by]
    except KeyError:
        raise ValueError(f"unknown sort column: {sort_by}") from None
    return sorted(items, key=key, reverse=descending)


@dataclass(frozen=True, slots=True)
class PriceRange:
    name: str
    min: int | None = None
    max: int | None = None


PRICE_RANGES: tuple[PriceRange, ...] = (
    PriceRange("All Prices"),
    PriceRange("Under 100", 0, 100),
    PriceRange("100-500", 100, 500),
    PriceRange("500-1000", 500, 1000),
    PriceRange("Over 1000", 1000, None),
)


def price_range(name: str) -> PriceRange:
    for candidate in PRICE_RANGES:
        if candidate.name.lower() == name.strip().lower():
            return candidate
    raise KeyError(f"unknown price range: {name}")


__all__ = [
    "ALL_CATEGORIES",
    "ItemFilter",
    "filter_items",
    "SORT_KEYS",
    "sort_items",
    "PriceRange",
    "PRICE_RANGES",
    "price_range",
]
