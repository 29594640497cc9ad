"""Logging configuration helpers."""

from __future__ import annotations

import logging
from contextlib import suppress
from logging import Handler
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable


def _close_handlers(handlers: Iterable[Handler]) -> None:
    for handler in handlers:
        logging.getLogger().removeHandler(handler)
        with suppress(Exception):  # pragma: no cover - best effort cleanup
            handler.close()


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def setup_logging(log_dir: str = "logs", level: int | str = logging.INFO) -> None:
    """Configure console and rotating file handlers for the catalog editor."""

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    level = _resolve_level(level)

    root = logging.getLogger()
    root.setLevel(level)

    if root.handlers:
        _close_handlers(list(root.handlers))

    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    file_handler = RotatingFileHandler(
        log_path / "catalog.log",
        maxBytes=5_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    error_handler = RotatingFileHandler(
        log_path / "errors.log",
        maxBytes=2_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.WARNING)
    error_handler.setFormatter(formatter)
    root.addHandler(error_handler)

    logging.getLogger("asyncio").setLevel(logging.INFO)

    resolved_level = logging.getLevelName(level)
    root.info("logging initialized, level=%s", resolved_level)
    root.info(
        "log_paths dir=%s catalog=%s errors=%s",
        log_path.resolve(),
        (log_path / "catalog.log").resolve(),
        (log_path / "errors.log").resolve(),
    )
