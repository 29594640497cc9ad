"""Keep two editor processes from rewriting the same data directory."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from catalog_manager.catalog.errors import CatalogInUseError

logger = logging.getLogger(__name__)

LOCK_NAME = ".catalog.lock"


def _pid_alive(pid: int) -> bool:
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # exists, owned by another user
        return True
    return True


@dataclass
class InstanceLock:
    """PID file in the data directory; stale files are taken over."""

    path: Path
    acquired: bool = False

    @classmethod
    def for_data_dir(cls, data_dir: Path | str) -> "InstanceLock":
        return cls(Path(data_dir) / LOCK_NAME)

    @property
    def holder(self) -> Optional[int]:
        try:
            return int(self.path.read_text().strip())
        except (OSError, ValueError):
            return None

    def acquire(self) -> None:
        holder = self.holder
        if holder is not None and holder != os.getpid() and _pid_alive(holder):
            raise CatalogInUseError(holder)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(str(os.getpid()))
        self.acquired = True
        logger.debug("instance lock taken path=%s stale_holder=%s", self.path, holder)

    def release(self) -> None:
        if not self.acquired:
            return
        self.acquired = False
        self.path.unlink(missing_ok=True)

    def __enter__(self) -> "InstanceLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
