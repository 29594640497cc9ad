"""Command line access to the catalog store."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Sequence

from catalog_manager.catalog import (
    CatalogError,
    CatalogItem,
    CatalogStore,
    build_store,
    ensure_valid,
)
from catalog_manager.catalog.names import MappingNameResolver, NameLookup
from catalog_manager.catalog.query import SORT_KEYS, price_range
from catalog_manager.config import Settings, settings
from catalog_manager.instance_lock import InstanceLock
from catalog_manager.logging_config import setup_logging

LOG = logging.getLogger(__name__)

_MUTATING = {"delete", "set-price", "modify", "save"}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="catalog-manager", description="Inspect and edit the store catalog.")
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory holding Catalog.json and CatalogPatch.json")
    parser.add_argument("--quiet", action="store_true", help="Skip log file setup")
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List items matching filters")
    list_cmd.add_argument("--category", default="All")
    list_cmd.add_argument("--search", default="")
    list_cmd.add_argument("--min", dest="price_min", type=int, default=None)
    list_cmd.add_argument("--max", dest="price_max", type=int, default=None)
    list_cmd.add_argument("--range", dest="price_range", default=None, help="Named price range, e.g. 'Under 100'")
    list_cmd.add_argument("--sort", choices=sorted(SORT_KEYS), default=None)
    list_cmd.add_argument("--desc", action="store_true")
    list_cmd.add_argument("--names", action="store_true", help="Resolve component prototype names")

    sub.add_parser("categories", help="List known categories")
    sub.add_parser("next-sku", help="Print the next free SKU id")

    modifiers_cmd = sub.add_parser("modifiers", help="List modifiers used in a category")
    modifiers_cmd.add_argument("category")

    delete_cmd = sub.add_parser("delete", help="Delete items")
    delete_cmd.add_argument("sku_ids", nargs="+", type=int)

    price_cmd = sub.add_parser("set-price", help="Set default-locale price of items")
    price_cmd.add_argument("price", type=int)
    price_cmd.add_argument("sku_ids", nargs="+", type=int)

    modify_cmd = sub.add_parser("modify", help="Add or remove modifiers on items")
    modify_cmd.add_argument("--add", action="append", default=[])
    modify_cmd.add_argument("--remove", action="append", default=[])
    modify_cmd.add_argument("sku_ids", nargs="+", type=int)

    save_cmd = sub.add_parser("save", help="Save an item read from a JSON file")
    save_cmd.add_argument("source", type=Path)
    return parser


def _name_lookup(settings_obj: Settings) -> NameLookup:
    resolver = None
    if settings_obj.PROTOTYPE_NAMES_FILE:
        try:
            resolver = MappingNameResolver.from_file(settings_obj.PROTOTYPE_NAMES_FILE)
        except (OSError, ValueError):
            LOG.warning("prototype names unavailable: %s", settings_obj.PROTOTYPE_NAMES_FILE, exc_info=True)
    return NameLookup(resolver, ttl=settings_obj.NAME_CACHE_TTL)


async def _format_item(item: CatalogItem, names: NameLookup | None) -> str:
    price = item.price if item.price is not None else "-"
    line = f"{item.sku_id}\t{item.category.name}\t{price}\t{item.title}"
    if names is not None:
        parts = []
        for component in item.primary_components:
            label = await names.display_name(component.prototype_ref)
            parts.append(f"{label} x{component.quantity}")
        line = f"{line}\t{', '.join(parts)}"
    return line


async def _run(args: argparse.Namespace, store: CatalogStore, settings_obj: Settings) -> int:
    command = args.command
    if command == "list":
        price_min, price_max = args.price_min, args.price_max
        if args.price_range:
            preset = price_range(args.price_range)
            price_min, price_max = preset.min, preset.max
        items = await store.query(
            args.category,
            args.search,
            price_min,
            price_max,
            sort_by=args.sort,
            descending=args.desc,
        )
        names = _name_lookup(settings_obj) if args.names else None
        for item in items:
            print(await _format_item(item, names))
        return 0
    if command == "categories":
        for category in await store.categories():
            print(category)
        return 0
    if command == "next-sku":
        print(await store.next_sku_id())
        return 0
    if command == "modifiers":
        await store.load()
        for name in store.category_modifiers(args.category):
            print(name)
        return 0
    if command == "delete":
        removed = await store.delete_many(args.sku_ids)
        print(f"deleted {removed} of {len(args.sku_ids)}")
        return 0 if removed else 1
    if command == "set-price":
        changed = await store.update_prices(args.sku_ids, args.price)
        print(f"updated {changed} of {len(args.sku_ids)}")
        return 0 if changed else 1
    if command == "modify":
        changed = await store.modify_modifiers(args.sku_ids, add=args.add, remove=args.remove)
        print(f"updated {changed} of {len(args.sku_ids)}")
        return 0 if changed else 1
    if command == "save":
        payload = json.loads(args.source.read_text(encoding="utf-8"))
        item = ensure_valid(CatalogItem.model_validate(payload))
        saved = await store.save(item, timeout=settings_obj.CATALOG_SAVE_TIMEOUT)
        print(f"saved {item.sku_id}" if saved else f"not saved {item.sku_id}")
        return 0 if saved else 1
    raise ValueError(f"unknown command: {command}")


def main(argv: Sequence[str] | None = None, settings_obj: Settings | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings_obj = settings_obj or settings
    if args.data_dir is not None:
        settings_obj = settings_obj.model_copy(update={"CATALOG_DATA_DIR": str(args.data_dir)})
    if not args.quiet:
        setup_logging(settings_obj.LOG_DIR, settings_obj.LOG_LEVEL)

    store = build_store(settings_obj)
    try:
        if args.command in _MUTATING:
            with InstanceLock.for_data_dir(settings_obj.data_dir):
                return asyncio.run(_run(args, store, settings_obj))
        return asyncio.run(_run(args, store, settings_obj))
    except CatalogError as exc:
        parser.exit(status=2, message=f"error: {exc}\n")
    except (OSError, ValueError, KeyError) as exc:
        parser.exit(status=2, message=f"error: {exc}\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
