from pathlib import Path

import pytest

from catalog_manager.config import Settings


def test_settings_defaults() -> None:
    settings_obj = Settings(_env_file=None)

    assert settings_obj.catalog_path == Path("Data") / "Catalog.json"
    assert settings_obj.patch_path == Path("Data") / "CatalogPatch.json"
    assert settings_obj.CATALOG_CACHE_TTL == 300.0
    assert settings_obj.CATALOG_SKU_FLOOR == 1000


@pytest.mark.parametrize("raw", ["", "none", "OFF"])
def test_lock_timeout_can_be_disabled(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("CATALOG_LOCK_TIMEOUT", raw)

    assert Settings(_env_file=None).CATALOG_LOCK_TIMEOUT is None


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("catalog_data_dir", "/srv/catalog")
    monkeypatch.setenv("CATALOG_LOCK_TIMEOUT", "2.5")

    settings_obj = Settings(_env_file=None)
    assert settings_obj.data_dir == Path("/srv/catalog")
    assert settings_obj.CATALOG_LOCK_TIMEOUT == 2.5
