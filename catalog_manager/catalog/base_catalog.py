"""Bulk catalog document shipped with the server.

Entries keep their position in ``Entries``: external tooling consuming the
file is order-sensitive, so edits and removals touch one entry and rewrite
the document around it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from catalog_manager.catalog.errors import CatalogIOError
from catalog_manager.catalog.models import (
    CatalogDocument,
    CatalogItem,
    Modifier,
    replace_modifiers,
)
from catalog_manager.catalog.write_guard import read_json, write_json

logger = logging.getLogger(__name__)


class BaseCatalog:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> CatalogDocument:
        # A deployment may run patch-only.
        if not self.path.exists():
            return CatalogDocument()

        try:
            payload = read_json(self.path)
        except OSError as exc:
            raise CatalogIOError("failed to read base catalog", self.path) from exc

        if not isinstance(payload, dict):
            raise CatalogIOError("base catalog must contain an object at the top level", self.path)
        if payload.get("Entries") is None:
            payload = {**payload, "Entries": []}
        try:
            return CatalogDocument.model_validate(payload)
        except ValidationError as exc:
            raise CatalogIOError(f"base catalog has invalid entries ({exc.error_count()} errors)", self.path) from exc

    def _persist(self, document: CatalogDocument) -> None:
        write_json(self.path, document.to_disk())

    def update_entry_in_place(self, item: CatalogItem) -> bool:
        if not self.path.exists():
            return False
        document = self.load()
        position = document.index_of(item.sku_id)
        if position < 0:
            return False
        document.entries[position] = item
        self._persist(document)
        logger.info("base update sku=%s position=%s", item.sku_id, position)
        return True

    def remove_entry(self, sku_id: int) -> bool:
        if not self.path.exists():
            return False
        document = self.load()
        position = document.index_of(sku_id)
        if position < 0:
            return False
        del document.entries[position]
        self._persist(document)
        logger.info("base remove sku=%s position=%s", sku_id, position)
        return True

    def update_modifiers_only(self, sku_id: int, modifiers: Iterable[Modifier]) -> bool:
        if not self.path.exists():
            return False
        document = self.load()
        position = document.index_of(sku_id)
        if position < 0:
            return False
        document.entries[position] = replace_modifiers(document.entries[position], modifiers)
        self._persist(document)
        logger.info("base modifiers sku=%s position=%s", sku_id, position)
        return True


__all__ = ["BaseCatalog"]
