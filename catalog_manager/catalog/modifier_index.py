"""Category to known type-modifier names, derived from the merged view."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from catalog_manager.catalog.models import CatalogItem

logger = logging.getLogger(__name__)


class ModifierIndex:
    def __init__(self) -> None:
        self._by_category: Dict[str, List[str]] = {}
        self._built = False

    @property
    def built(self) -> bool:
        return self._built

    def rebuild(self, items: Iterable[CatalogItem]) -> None:
        index: Dict[str, List[str]] = {}
        for item in items:
            names = index.setdefault(item.category.name, [])
            for modifier in item.modifiers:
                if modifier.name not in names:
                    names.append(modifier.name)
        self._by_category = index
        self._built = True
        logger.debug("modifier index rebuilt categories=%s", len(index))

    def modifiers_for(self, category: str) -> List[str]:
        return list(self._by_category.get(category, ()))

    def categories(self) -> List[str]:
        return sorted(self._by_category)


__all__ = ["ModifierIndex"]
