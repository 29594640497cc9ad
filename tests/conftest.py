"""Test configuration helpers."""

from __future__ import annotations

import asyncio
import inspect
import json
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from catalog_manager.catalog.base_catalog import BaseCatalog  # noqa: E402
from catalog_manager.catalog.models import CatalogItem  # noqa: E402
from catalog_manager.catalog.patch_store import PatchStore  # noqa: E402
from catalog_manager.catalog.store import CatalogStore  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register the asyncio marker for the lightweight runner below."""

    config.addinivalue_line("markers", "asyncio: execute the test inside an event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute ``@pytest.mark.asyncio`` tests without requiring pytest-asyncio."""

    marker = pyfuncitem.get_closest_marker("asyncio")
    if marker is None:
        return None

    func = pyfuncitem.obj
    if not asyncio.iscoroutinefunction(func):
        return None

    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        params = inspect.signature(func).parameters
        kwargs = {name: value for name, value in pyfuncitem.funcargs.items() if name in params}
        loop.run_until_complete(func(**kwargs))
    finally:
        asyncio.set_event_loop(None)
        loop.close()
    return True


def make_item_payload(
    sku_id: int,
    title: str = "Item",
    *,
    category: str = "Boost",
    price: int = 100,
    prototype_ref: int = 5_000_000_001,
    modifiers: tuple[str, ...] = (),
    extra_prices: tuple[int, ...] = (),
) -> dict[str, Any]:
    localizations = [
        {
            "LanguageId": "en_us",
            "Description": f"{title} description",
            "Title": title,
            "ReleaseDate": "",
            "ItemPrice": price,
        }
    ]
    for index, extra in enumerate(extra_prices):
        localizations.append(
            {
                "LanguageId": f"xx_{index}",
                "Description": "",
                "Title": title,
                "ReleaseDate": "",
                "ItemPrice": extra,
            }
        )
    return {
        "SkuId": sku_id,
        "GuidItems": [
            {"PrototypeGuid": 0, "ItemPrototypeRuntimeIdForClient": prototype_ref, "Quantity": 1}
        ],
        "AdditionalGuidItems": [],
        "LocalizedEntries": localizations,
        "InfoUrls": [],
        "ContentData": [],
        "Type": {"Name": category, "Order": 3},
        "TypeModifiers": [{"Name": name, "Order": 3} for name in modifiers],
    }


@pytest.fixture
def item_payload() -> Callable[..., dict[str, Any]]:
    return make_item_payload


@pytest.fixture
def make_item() -> Callable[..., CatalogItem]:
    def _make(sku_id: int, title: str = "Item", **kwargs: Any) -> CatalogItem:
        return CatalogItem.model_validate(make_item_payload(sku_id, title, **kwargs))

    return _make


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    path = tmp_path / "Data"
    path.mkdir()
    return path


@pytest.fixture
def write_base(data_dir: Path) -> Callable[..., Path]:
    def _write(entries: list[dict[str, Any]], **extra: Any) -> Path:
        payload = {
            "TimestampSeconds": 1700000000,
            "TimestampMicroseconds": 0,
            "Entries": entries,
            "UrlSets": [],
            "ClientMustDownloadImages": False,
            **extra,
        }
        path = data_dir / "Catalog.json"
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_patch(data_dir: Path) -> Callable[[list[dict[str, Any]]], Path]:
    def _write(entries: list[dict[str, Any]]) -> Path:
        path = data_dir / "CatalogPatch.json"
        path.write_text(json.dumps(entries, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def store(data_dir: Path) -> CatalogStore:
    return CatalogStore(
        PatchStore(data_dir / "CatalogPatch.json"),
        BaseCatalog(data_dir / "Catalog.json"),
    )
