"""Catalog persistence: patch overlay, base document and the merged store."""

from .errors import (
    CatalogBusyError,
    CatalogError,
    CatalogIOError,
    CatalogNotFoundError,
    CatalogTimeoutError,
    CatalogValidationError,
    QueryCancelledError,
)
from .merge_cache import MergedView
from .models import CatalogDocument, CatalogItem, Category, Component, Localization, Modifier, ensure_valid
from .query import ALL_CATEGORIES, PRICE_RANGES
from .store import CatalogStore, build_store

__all__ = [
    "ALL_CATEGORIES",
    "PRICE_RANGES",
    "CatalogBusyError",
    "CatalogDocument",
    "CatalogError",
    "CatalogIOError",
    "CatalogItem",
    "CatalogNotFoundError",
    "CatalogStore",
    "CatalogTimeoutError",
    "CatalogValidationError",
    "Category",
    "Component",
    "Localization",
    "MergedView",
    "Modifier",
    "QueryCancelledError",
    "build_store",
    "ensure_valid",
]
