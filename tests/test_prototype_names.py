import json
from pathlib import Path

import pytest

from catalog_manager.catalog.names import MappingNameResolver, NameLookup


@pytest.mark.asyncio
async def test_display_name_caches_resolver_results() -> None:
    calls = {"count": 0}

    def resolver(ref: int) -> str:
        calls["count"] += 1
        return f"Entity/Items/Costumes/{ref}"

    lookup = NameLookup(resolver, ttl=60)
    try:
        first = await lookup.display_name(42)
        second = await lookup.display_name(42)
    finally:
        await lookup.clear()

    assert first == second == "Entity/Items/Costumes/42"
    assert calls["count"] == 1


@pytest.mark.asyncio
async def test_display_name_falls_back_to_raw_reference() -> None:
    def resolver(ref: int) -> str:
        raise LookupError(ref)

    assert await NameLookup(resolver).display_name(9000000001) == "9000000001"
    assert await NameLookup(lambda ref: "   ").display_name(7) == "7"
    assert await NameLookup(None).display_name(8) == "8"


@pytest.mark.asyncio
async def test_mapping_resolver_from_file(tmp_path: Path) -> None:
    path = tmp_path / "names.json"
    path.write_text(json.dumps({"11": "Entity/Items/Boosts/XP", "oops": "skip", "12": ""}), encoding="utf-8")

    resolver = MappingNameResolver.from_file(path)
    lookup = NameLookup(resolver)

    assert await lookup.display_name(11) == "Entity/Items/Boosts/XP"
    assert await lookup.display_name(12) == "12"
    await lookup.clear()


def test_mapping_resolver_rejects_non_object(tmp_path: Path) -> None:
    path = tmp_path / "names.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError):
        MappingNameResolver.from_file(path)
