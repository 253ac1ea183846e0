"""Single-instance guard for a data directory.

Two clients sharing one ``client_state.json`` would overwrite each other's
token and flags, so the GUI launcher holds a PID lock file next to it.
Stale locks (owner process gone) are reclaimed.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import psutil

__all__ = ["InstanceLock", "single_instance", "LOCK_FILENAME"]

_log = logging.getLogger(__name__)

LOCK_FILENAME = "schoolapp.lock"


def _pid_alive(pid: int) -> bool:
    try:
        return psutil.pid_exists(pid)
    except (OSError, psutil.Error):  # pragma: no cover - platform quirks
        return True


class InstanceLock:
    def __init__(self, data_dir: str | Path, filename: str = LOCK_FILENAME) -> None:
        self.path = Path(data_dir) / filename
        self._fd: Optional[int] = None

    @property
    def held(self) -> bool:
        return self._fd is not None

    def acquire(self) -> bool:
        if self._fd is not None:
            return True
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self._try_create():
            return True
        owner = self._read_owner()
        if owner is not None and owner != os.getpid() and _pid_alive(owner):
            _log.warning("another instance (pid %s) holds %s", owner, self.path)
            return False
        _log.info("reclaiming stale lock %s (pid %s)", self.path, owner)
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        return self._try_create()

    def release(self) -> None:
        if self._fd is None:
            return
        os.close(self._fd)
        self._fd = None
        try:
            self.path.unlink()
        except FileNotFoundError:  # pragma: no cover - removed externally
            pass

    def _try_create(self) -> bool:
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_RDWR, 0o644)
        except FileExistsError:
            return False
        os.write(fd, str(os.getpid()).encode("utf-8"))
        self._fd = fd
        return True

    def _read_owner(self) -> Optional[int]:
        try:
            text = self.path.read_text(encoding="utf-8").strip()
        except OSError:
            return None
        return int(text) if text.isdigit() else None


@contextmanager
def single_instance(data_dir: str | Path) -> Iterator[bool]:
    """Yield True if this process owns the data directory."""
    lock = InstanceLock(data_dir)
    acquired = lock.acquire()
    try:
        yield acquired
    finally:
        if acquired:
            lock.release()
