from pathlib import Path

import pytest

from catalog_manager.catalog import write_guard
from catalog_manager.catalog.errors import CatalogIOError


def test_overwrite_creates_file_without_backup(tmp_path: Path) -> None:
    target = tmp_path / "Catalog.json"

    write_guard.overwrite(target, "first")

    assert target.read_text(encoding="utf-8") == "first"
    assert not write_guard.backup_path(target).exists()


def test_overwrite_keeps_previous_content_in_backup(tmp_path: Path) -> None:
    target = tmp_path / "Catalog.json"
    target.write_text("old", encoding="utf-8")

    write_guard.overwrite(target, "new")
    assert target.read_text(encoding="utf-8") == "new"
    assert write_guard.backup_path(target).read_text(encoding="utf-8") == "old"

    write_guard.overwrite(target, "newer")
    assert write_guard.backup_path(target).read_text(encoding="utf-8") == "new"


def test_failed_write_leaves_target_untouched(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "CatalogPatch.json"
    target.write_text('[{"SkuId": 1}]', encoding="utf-8")

    def _broken(tmp_path: Path, data: bytes) -> None:
        tmp_path.write_bytes(data[:3])
        raise OSError("disk full")

    monkeypatch.setattr(write_guard, "_write_temp", _broken)

    with pytest.raises(CatalogIOError) as excinfo:
        write_guard.overwrite(target, "[]")

    assert target.read_text(encoding="utf-8") == '[{"SkuId": 1}]'
    assert not (tmp_path / "CatalogPatch.json.tmp").exists()
    assert isinstance(excinfo.value.__cause__, OSError)


def test_failed_replace_restores_from_backup(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "Catalog.json"
    target.write_text("valid", encoding="utf-8")

    def _replace_then_fail(src, dst) -> None:  # noqa: ANN001
        Path(dst).write_text("partial", encoding="utf-8")
        raise OSError("power loss")

    monkeypatch.setattr(write_guard.os, "replace", _replace_then_fail)

    with pytest.raises(CatalogIOError):
        write_guard.overwrite(target, "replacement")

    assert target.read_text(encoding="utf-8") == "valid"


def test_write_json_rejects_unserializable_payload_before_touching_disk(tmp_path: Path) -> None:
    target = tmp_path / "Catalog.json"
    target.write_text("{}", encoding="utf-8")

    with pytest.raises(CatalogIOError):
        write_guard.write_json(target, {"bad": object()})

    assert target.read_text(encoding="utf-8") == "{}"
    assert not write_guard.backup_path(target).exists()


def test_write_json_round_trips(tmp_path: Path) -> None:
    target = tmp_path / "doc.json"
    write_guard.write_json(target, {"Entries": [], "Title": "Ёлка"})

    assert write_guard.read_json(target) == {"Entries": [], "Title": "Ёлка"}
    assert "Ёлка" in target.read_text(encoding="utf-8")


def test_read_json_reports_corrupt_file(tmp_path: Path) -> None:
    target = tmp_path / "doc.json"
    target.write_text("{broken", encoding="utf-8")

    with pytest.raises(CatalogIOError):
        write_guard.read_json(target)
