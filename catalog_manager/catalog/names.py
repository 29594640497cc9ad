"""Prototype name lookup with aiocache-backed memoization."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Dict, Mapping

from aiocache import Cache
from aiocache.serializers import PickleSerializer

logger = logging.getLogger(__name__)

_NAMESPACE = "prototype-names"
_DEFAULT_TTL = 600

NameResolver = Callable[[int], str]


class MappingNameResolver:
    """Resolve prototype references from a ``{ref: name}`` mapping."""

    def __init__(self, names: Mapping[int, str]) -> None:
        self._names: Dict[int, str] = dict(names)

    @classmethod
    def from_file(cls, path: Path | str) -> "MappingNameResolver":
        with Path(path).open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
        if not isinstance(payload, dict):
            raise ValueError(f"{path} must contain an object mapping prototype ids to names")
        names: Dict[int, str] = {}
        for raw_ref, raw_name in payload.items():
            try:
                ref = int(raw_ref)
            except (TypeError, ValueError):
                continue
            if isinstance(raw_name, str) and raw_name.strip():
                names[ref] = raw_name.strip()
        return cls(names)

    def __call__(self, prototype_ref: int) -> str:
        return self._names[prototype_ref]


class NameLookup:
    """Display names for prototype references; lookups never fail."""

    def __init__(self, resolver: NameResolver | None, *, ttl: int = _DEFAULT_TTL) -> None:
        self._resolver = resolver
        self._ttl = ttl
        self._cache = Cache(
            Cache.MEMORY,
            namespace=_NAMESPACE,
            serializer=PickleSerializer(),
        )

    async def display_name(self, prototype_ref: int) -> str:
        fallback = str(prototype_ref)
        if self._resolver is None:
            return fallback

        key = str(prototype_ref)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        try:
            name = self._resolver(prototype_ref)
        except Exception:  # noqa: BLE001 - resolver failures fall back to the raw id
            logger.debug("prototype name lookup failed ref=%s", prototype_ref, exc_info=True)
            return fallback
        if not isinstance(name, str) or not name.strip():
            return fallback

        await self._cache.set(key, name, ttl=self._ttl)
        return name

    async def clear(self) -> None:
        await self._cache.clear()


__all__ = ["NameResolver", "MappingNameResolver", "NameLookup"]
