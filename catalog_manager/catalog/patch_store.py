"""Overlay document holding new and edited catalog entries."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from pydantic import ValidationError

from catalog_manager.catalog.errors import CatalogIOError
from catalog_manager.catalog.models import (
    PATCH_ADAPTER,
    CatalogItem,
    Modifier,
    dump_items,
    replace_modifiers,
)
from catalog_manager.catalog.write_guard import read_json, write_json

logger = logging.getLogger(__name__)


class PatchStore:
    """Read and rewrite the patch file, a bare JSON array of items."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> List[CatalogItem]:
        if not self.path.exists():
            logger.info("patch document missing, creating empty %s", self.path)
            write_json(self.path, [])
            return []

        try:
            payload = read_json(self.path)
        except OSError as exc:
            raise CatalogIOError("failed to read patch document", self.path) from exc

        if payload is None:
            return []
        if not isinstance(payload, list):
            raise CatalogIOError("patch document must contain an array", self.path)
        try:
            return PATCH_ADAPTER.validate_python(payload)
        except ValidationError as exc:
            raise CatalogIOError(f"patch document has invalid entries ({exc.error_count()} errors)", self.path) from exc

    def _persist(self, items: Iterable[CatalogItem]) -> None:
        write_json(self.path, dump_items(items))

    def upsert(self, item: CatalogItem) -> None:
        items = [entry for entry in self.load() if entry.sku_id != item.sku_id]
        items.append(item)
        self._persist(items)
        logger.info("patch upsert sku=%s entries=%s", item.sku_id, len(items))

    def remove(self, sku_id: int) -> bool:
        if not self.path.exists():
            return False
        items = self.load()
        remaining = [entry for entry in items if entry.sku_id != sku_id]
        if len(remaining) == len(items):
            return False
        self._persist(remaining)
        logger.info("patch remove sku=%s entries=%s", sku_id, len(remaining))
        return True

    def update_modifiers_only(self, sku_id: int, modifiers: Iterable[Modifier]) -> bool:
        """Swap the modifier list of one entry, leaving its other fields as stored."""

        if not self.path.exists():
            return False
        items = self.load()
        for position, entry in enumerate(items):
            if entry.sku_id == sku_id:
                items[position] = replace_modifiers(entry, modifiers)
                self._persist(items)
                logger.info("patch modifiers sku=%s", sku_id)
                return True
        return False


__all__ = ["PatchStore"]
