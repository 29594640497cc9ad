"""Cached merged view of patch and base catalog entries."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List

from catalog_manager.catalog.base_catalog import BaseCatalog
from catalog_manager.catalog.models import CatalogItem
from catalog_manager.catalog.patch_store import PatchStore

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300.0
EPOCH = 0.0


@dataclass(slots=True)
class MergedView:
    """Patch entries first, then base entries not shadowed by the patch."""

    items: List[CatalogItem] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    patch_sku_ids: frozenset[int] = frozenset()
    built_at: float = EPOCH

    def is_from_patch(self, sku_id: int) -> bool:
        return sku_id in self.patch_sku_ids

    def find(self, sku_id: int) -> CatalogItem | None:
        for item in self.items:
            if item.sku_id == sku_id:
                return item
        return None

    def sku_ids(self) -> set[int]:
        return {item.sku_id for item in self.items}


def merge(patch_items: List[CatalogItem], base_items: List[CatalogItem], built_at: float) -> MergedView:
    patch_ids = frozenset(item.sku_id for item in patch_items)
    items = list(patch_items)
    items.extend(item for item in base_items if item.sku_id not in patch_ids)
    categories = sorted({item.category.name for item in items})
    return MergedView(items=items, categories=categories, patch_sku_ids=patch_ids, built_at=built_at)


RebuildListener = Callable[[MergedView], None]


class MergeCache:
    def __init__(
        self,
        patch: PatchStore,
        base: BaseCatalog,
        *,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._patch = patch
        self._base = base
        self._ttl = ttl
        self._clock = clock
        self._view = MergedView()
        self._built_at = EPOCH
        self._listeners: list[RebuildListener] = []

    @property
    def current(self) -> MergedView:
        """Last successfully built view, possibly stale."""

        return self._view

    @property
    def built_at(self) -> float:
        return self._built_at

    def add_listener(self, listener: RebuildListener) -> None:
        self._listeners.append(listener)

    def is_fresh(self) -> bool:
        if self._built_at == EPOCH:
            return False
        return self._clock() - self._built_at <= self._ttl

    def fresh_view(self) -> MergedView | None:
        if self.is_fresh():
            return self._view
        return None

    def invalidate(self) -> None:
        self._built_at = EPOCH

    def get_view(self, force_refresh: bool = False) -> MergedView:
        if not force_refresh and self.is_fresh():
            return self._view
        return self._rebuild()

    def _rebuild(self) -> MergedView:
        # A failure here leaves the previous view and stamp untouched.
        patch_items = self._patch.load()
        document = self._base.load()
        now = self._clock()
        view = merge(patch_items, document.entries, now)
        self._view = view
        self._built_at = now
        logger.info(
            "catalog view rebuilt items=%s patch=%s categories=%s",
            len(view.items),
            len(view.patch_sku_ids),
            len(view.categories),
        )
        for listener in self._listeners:
            listener(view)
        return view


__all__ = ["MergedView", "MergeCache", "merge", "EPOCH"]
