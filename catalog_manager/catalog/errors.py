"""Exception hierarchy for catalog persistence."""

from __future__ import annotations

from typing import Iterable, Optional


class CatalogError(RuntimeError):
    """Base class for catalog store failures."""


class CatalogIOError(CatalogError):
    """Raised when a catalog document cannot be read, parsed or written."""

    def __init__(self, message: str, path: object | None = None) -> None:
        self.path = path
        if path is not None:
            message = f"{message}: {path}"
        super().__init__(message)


class CatalogNotFoundError(CatalogError):
    """Raised by callers that need a missing SKU to be an error."""

    def __init__(self, sku_id: int) -> None:
        self.sku_id = sku_id
        super().__init__(f"SKU {sku_id} is not in the catalog")


class CatalogValidationError(CatalogError):
    """Raised when an item is missing fields required for saving."""

    def __init__(self, problems: Iterable[str]) -> None:
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "invalid catalog item")


class CatalogBusyError(CatalogError):
    """Raised when the store lock cannot be acquired in time."""


class CatalogTimeoutError(CatalogError):
    """Raised when a save does not finish within the caller's deadline."""


class QueryCancelledError(CatalogError):
    """Raised when a query observes its cancellation event."""


class CatalogInUseError(CatalogError):
    """Raised when another editor process already holds the data directory."""

    def __init__(self, pid: Optional[int] = None) -> None:
        self.pid = pid
        message = "Catalog data directory is already in use"
        if pid is not None:
            message = f"{message} (PID {pid})"
        super().__init__(message)


__all__ = [
    "CatalogError",
    "CatalogIOError",
    "CatalogNotFoundError",
    "CatalogValidationError",
    "CatalogBusyError",
    "CatalogTimeoutError",
    "QueryCancelledError",
    "CatalogInUseError",
]
