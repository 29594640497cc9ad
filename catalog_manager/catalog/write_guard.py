"""Crash-safe overwrite of a single catalog file.

Every overwrite first copies the current file to ``<name>.bak``.  The new
content goes to a sibling temporary file which is flushed, fsynced and then
renamed over the target, so readers only ever see the old or the new
document.  If anything fails after the target was touched, it is restored
from the backup before the error is raised.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any

from catalog_manager.catalog.errors import CatalogIOError

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"
TEMP_SUFFIX = ".tmp"


def backup_path(path: Path) -> Path:
    return path.with_name(path.name + BACKUP_SUFFIX)


def _temp_path(path: Path) -> Path:
    return path.with_name(f"{path.name}{TEMP_SUFFIX}")


def _write_temp(tmp_path: Path, data: bytes) -> None:
    with tmp_path.open("wb") as fh:
        fh.write(data)
        fh.flush()
        os.fsync(fh.fileno())


def _restore(path: Path, backup: Path, previous: bytes | None) -> None:
    if previous is None:
        return
    try:
        if path.exists() and path.read_bytes() == previous:
            return
    except OSError:
        pass
    if not backup.exists():
        logger.error("write_guard: no backup available to restore %s", path)
        return
    try:
        shutil.copyfile(backup, path)
    except OSError:
        logger.exception("write_guard: failed to restore %s from %s", path, backup)
    else:
        logger.warning("write_guard: restored %s from backup", path)


def overwrite(path: Path | str, content: str | bytes) -> None:
    """Replace ``path`` with ``content`` keeping a ``.bak`` copy of the old file."""

    path = Path(path)
    data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
    backup = backup_path(path)
    tmp_path = _temp_path(path)
    previous: bytes | None = None

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            previous = path.read_bytes()
            shutil.copyfile(path, backup)
        _write_temp(tmp_path, data)
        os.replace(tmp_path, path)
    except OSError as exc:
        if tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                logger.warning("write_guard: could not remove %s", tmp_path)
        _restore(path, backup, previous)
        raise CatalogIOError("failed to write catalog file", path) from exc

    logger.debug("write_guard: wrote %s bytes to %s", len(data), path)


def encode_json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"


def write_json(path: Path | str, payload: Any) -> None:
    """Serialize ``payload`` before touching the disk, then overwrite ``path``."""

    try:
        text = encode_json(payload)
    except (TypeError, ValueError) as exc:
        raise CatalogIOError("catalog payload is not serializable", path) from exc
    overwrite(path, text)


def read_json(path: Path | str) -> Any:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as exc:
        raise CatalogIOError("catalog file is not valid JSON", path) from exc
    except UnicodeDecodeError as exc:
        raise CatalogIOError("catalog file is not valid UTF-8", path) from exc


__all__ = ["BACKUP_SUFFIX", "backup_path", "overwrite", "encode_json", "write_json", "read_json"]
