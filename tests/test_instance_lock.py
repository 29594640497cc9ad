import os
from pathlib import Path

import pytest

from catalog_manager import instance_lock as instance_lock_module
from catalog_manager.catalog.errors import CatalogInUseError
from catalog_manager.instance_lock import InstanceLock


def test_lock_writes_and_removes_pid_file(tmp_path: Path) -> None:
    lock = InstanceLock.for_data_dir(tmp_path)

    with lock:
        assert lock.path.read_text() == str(os.getpid())

    assert not lock.path.exists()
    assert lock.acquired is False


def test_lock_refuses_live_foreign_process(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    lock = InstanceLock.for_data_dir(tmp_path)
    lock.path.write_text("424242")
    monkeypatch.setattr(instance_lock_module, "_pid_alive", lambda pid: True)

    with pytest.raises(CatalogInUseError) as excinfo:
        lock.acquire()

    assert excinfo.value.pid == 424242


def test_lock_takes_over_stale_pid(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    lock = InstanceLock.for_data_dir(tmp_path)
    lock.path.write_text("not-a-pid")

    lock.acquire()
    try:
        assert lock.acquired
    finally:
        lock.release()


def test_lock_reports_holder(tmp_path: Path) -> None:
    lock = InstanceLock.for_data_dir(tmp_path)
    assert lock.holder is None

    with lock:
        assert lock.holder == os.getpid()
        # a second handle in the same process may re-enter
        InstanceLock.for_data_dir(tmp_path).acquire()
