"""Public data-access surface of the catalog editor."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import TYPE_CHECKING, AsyncIterator, Callable, Iterable, Iterator, List

from catalog_manager.catalog.base_catalog import BaseCatalog
from catalog_manager.catalog.errors import CatalogBusyError, CatalogError, CatalogTimeoutError
from catalog_manager.catalog.merge_cache import DEFAULT_TTL, MergeCache, MergedView
from catalog_manager.catalog.models import CatalogItem, Modifier
from catalog_manager.catalog.modifier_index import ModifierIndex
from catalog_manager.catalog.patch_store import PatchStore
from catalog_manager.catalog.query import ALL_CATEGORIES, ItemFilter, filter_items, sort_items

if TYPE_CHECKING:
    from catalog_manager.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_SKU_FLOOR = 1000
DEFAULT_LOCK_TIMEOUT = 10.0


class CatalogStore:
    """Merged catalog access with every mutation serialized through one lock."""

    def __init__(
        self,
        patch: PatchStore,
        base: BaseCatalog,
        *,
        cache_ttl: float = DEFAULT_TTL,
        lock_timeout: float | None = DEFAULT_LOCK_TIMEOUT,
        sku_floor: int = DEFAULT_SKU_FLOOR,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._patch = patch
        self._base = base
        self._cache = MergeCache(patch, base, ttl=cache_ttl, clock=clock)
        self._index = ModifierIndex()
        self._cache.add_listener(lambda view: self._index.rebuild(view.items))
        self._lock = asyncio.Lock()
        self._lock_timeout = lock_timeout
        self._sku_floor = sku_floor
        self._startup: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> asyncio.Task[None]:
        """Load the catalog and build the modifier index in the background."""

        if self._startup is None:
            self._startup = asyncio.create_task(self._warm_up(), name="catalog-warm-up")
        return self._startup

    async def close(self) -> None:
        if self._startup is not None and not self._startup.done():
            await self._startup

    async def _warm_up(self) -> None:
        try:
            await self.load()
        except CatalogError:
            logger.exception("catalog warm-up failed")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def load(self, force_refresh: bool = False, *, blocking: bool = True) -> MergedView:
        if not force_refresh:
            view = self._cache.fresh_view()
            if view is not None:
                return view
        async with self._locked(blocking=blocking):
            return await self._refresh(force_refresh)

    async def categories(self) -> List[str]:
        view = await self.load()
        return list(view.categories)

    async def query(
        self,
        category: str = ALL_CATEGORIES,
        search_text: str = "",
        price_min: int | None = None,
        price_max: int | None = None,
        *,
        cancel: asyncio.Event | None = None,
        sort_by: str | None = None,
        descending: bool = False,
    ) -> List[CatalogItem]:
        view = await self.load()
        item_filter = ItemFilter(
            category=category,
            search_text=search_text,
            price_min=price_min,
            price_max=price_max,
        )
        items = await filter_items(view.items, item_filter, cancel=cancel)
        if sort_by:
            items = sort_items(items, sort_by, descending=descending)
        return items

    def is_from_patch(self, sku_id: int) -> bool:
        """Answer from the last loaded view.

        Mutations only invalidate the cache, so await :meth:`load` after a
        save or delete before asking about the SKU it touched.
        """

        return self._cache.current.is_from_patch(sku_id)

    async def next_sku_id(self) -> int:
        view = await self.load()
        if not view.items:
            return self._sku_floor
        return max(item.sku_id for item in view.items) + 1

    def category_modifiers(self, category: str) -> List[str]:
        return self._index.modifiers_for(category)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    async def save(self, item: CatalogItem, *, timeout: float | None = None, blocking: bool = True) -> bool:
        """Write ``item`` to the store that owns its SKU.

        New SKUs and SKUs already in the patch go to the patch; base-resident
        SKUs are edited in place. With ``timeout`` the caller stops waiting
        after that many seconds and gets :class:`CatalogTimeoutError`; the
        write itself is never interrupted.
        """

        if timeout is None:
            return await self._save(item, blocking=blocking)

        task = asyncio.ensure_future(self._save(item, blocking=blocking))
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout)
        except asyncio.TimeoutError as exc:
            task.add_done_callback(_log_late_result)
            logger.warning("save of sku=%s exceeded %.1fs", item.sku_id, timeout)
            raise CatalogTimeoutError(f"saving SKU {item.sku_id} took longer than {timeout}s") from exc

    async def _save(self, item: CatalogItem, *, blocking: bool) -> bool:
        async with self._locked(blocking=blocking):
            view = await self._refresh()
            with self._invalidating():
                return await self._write_item(view, item)

    async def delete(self, sku_id: int, *, blocking: bool = True) -> bool:
        async with self._locked(blocking=blocking):
            return await self._delete_unlocked(sku_id)

    async def update_modifiers(self, item: CatalogItem, *, blocking: bool = True) -> bool:
        async with self._locked(blocking=blocking):
            view = await self._refresh()
            with self._invalidating():
                return await self._write_modifiers(view, item.sku_id, item.modifiers)

    async def delete_many(self, sku_ids: Iterable[int], *, blocking: bool = True) -> int:
        async with self._locked(blocking=blocking):
            removed = 0
            for sku_id in sku_ids:
                if await self._delete_unlocked(sku_id):
                    removed += 1
            logger.info("batch delete removed=%s", removed)
            return removed

    async def update_prices(self, sku_ids: Iterable[int], price: int, *, blocking: bool = True) -> int:
        """Set the default-locale price of every listed item."""

        async with self._locked(blocking=blocking):
            view = await self._refresh()
            changed = 0
            with self._invalidating():
                for sku_id in sku_ids:
                    current = view.find(sku_id)
                    if current is None or not current.localizations:
                        continue
                    updated = current.model_copy(deep=True)
                    updated.localizations[0].price = price
                    if await self._write_item(view, updated):
                        changed += 1
            logger.info("batch price update price=%s changed=%s", price, changed)
            return changed

    async def modify_modifiers(
        self,
        sku_ids: Iterable[int],
        *,
        add: Iterable[str] = (),
        remove: Iterable[str] = (),
        blocking: bool = True,
    ) -> int:
        """Add and remove modifier names across several items.

        Added modifiers take the item's category order.
        """

        to_add = [name for name in dict.fromkeys(add) if name]
        to_remove = set(remove)
        async with self._locked(blocking=blocking):
            view = await self._refresh()
            changed = 0
            with self._invalidating():
                for sku_id in sku_ids:
                    current = view.find(sku_id)
                    if current is None:
                        continue
                    modifiers = [m for m in current.modifiers if m.name not in to_remove]
                    present = {m.name for m in modifiers}
                    modifiers.extend(
                        Modifier(name=name, order=current.category.order)
                        for name in to_add
                        if name not in present
                    )
                    if [(m.name, m.order) for m in modifiers] == [(m.name, m.order) for m in current.modifiers]:
                        continue
                    if await self._write_modifiers(view, sku_id, modifiers):
                        changed += 1
            logger.info("batch modifier update add=%s remove=%s changed=%s", to_add, sorted(to_remove), changed)
            return changed

    # ------------------------------------------------------------------
    # Internal helpers; callers hold the lock
    # ------------------------------------------------------------------
    @contextlib.asynccontextmanager
    async def _locked(self, *, blocking: bool = True) -> AsyncIterator[None]:
        if not blocking and self._lock.locked():
            raise CatalogBusyError("catalog store is busy")
        try:
            if self._lock_timeout is None:
                await self._lock.acquire()
            else:
                await asyncio.wait_for(self._lock.acquire(), self._lock_timeout)
        except asyncio.TimeoutError as exc:
            raise CatalogBusyError(f"catalog store lock not acquired within {self._lock_timeout}s") from exc
        try:
            yield
        finally:
            self._lock.release()

    async def _refresh(self, force_refresh: bool = False) -> MergedView:
        return await asyncio.to_thread(self._cache.get_view, force_refresh)

    async def _write_item(self, view: MergedView, item: CatalogItem) -> bool:
        if view.find(item.sku_id) is None or view.is_from_patch(item.sku_id):
            await asyncio.to_thread(self._patch.upsert, item)
            return True
        if await asyncio.to_thread(self._base.update_entry_in_place, item):
            return True
        logger.warning("base entry sku=%s disappeared before it could be updated", item.sku_id)
        return False

    async def _write_modifiers(self, view: MergedView, sku_id: int, modifiers: Iterable[Modifier]) -> bool:
        if view.find(sku_id) is None:
            return False
        modifiers = list(modifiers)
        if view.is_from_patch(sku_id):
            return await asyncio.to_thread(self._patch.update_modifiers_only, sku_id, modifiers)
        return await asyncio.to_thread(self._base.update_modifiers_only, sku_id, modifiers)

    async def _delete_unlocked(self, sku_id: int) -> bool:
        from_patch = from_base = False
        try:
            from_patch = await asyncio.to_thread(self._patch.remove, sku_id)
            from_base = await asyncio.to_thread(self._base.remove_entry, sku_id)
        finally:
            if from_patch or from_base:
                self._cache.invalidate()
        if from_patch or from_base:
            logger.info("deleted sku=%s patch=%s base=%s", sku_id, from_patch, from_base)
        return from_patch or from_base

    @contextlib.contextmanager
    def _invalidating(self) -> Iterator[None]:
        # attempted writes may have reached disk even when one of them failed
        try:
            yield
        finally:
            self._cache.invalidate()


def _log_late_result(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("late save failed: %s", exc)
    else:
        logger.info("late save finished result=%s", task.result())


def build_store(settings_obj: "Settings | None" = None) -> CatalogStore:
    """Create the application's single store from settings."""

    if settings_obj is None:
        from catalog_manager.config import settings as settings_obj

    return CatalogStore(
        PatchStore(settings_obj.patch_path),
        BaseCatalog(settings_obj.catalog_path),
        cache_ttl=settings_obj.CATALOG_CACHE_TTL,
        lock_timeout=settings_obj.CATALOG_LOCK_TIMEOUT,
        sku_floor=settings_obj.CATALOG_SKU_FLOOR,
    )


__all__ = ["CatalogStore", "build_store", "DEFAULT_SKU_FLOOR"]
