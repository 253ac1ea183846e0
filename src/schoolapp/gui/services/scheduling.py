"""One-shot timer scheduling used by the notification bus and view models.

The buses stay Qt-free; the GUI injects ``QtScheduler`` (single-shot
``QTimer`` on the UI thread) while headless runs fall back to
``ThreadingScheduler``. Tests use a manual fake that advances virtual time.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional, Protocol

__all__ = ["TimerHandle", "Scheduler", "ThreadingScheduler", "QtScheduler"]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...  # pragma: no cover - structural


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...  # pragma: no cover


class ThreadingScheduler:
    """Daemon ``threading.Timer`` per call; callbacks run off the caller thread."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(0, delay_ms) / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return timer


class _QtTimerHandle:
    def __init__(self, timer: Any) -> None:
        self._timer: Optional[Any] = timer

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer.deleteLater()
            self._timer = None

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()


class QtScheduler:
    """Single-shot ``QTimer`` scheduling on the Qt event loop.

    PyQt6 is imported lazily so importing this module never requires Qt.
    """

    def __init__(self, parent: Any = None) -> None:
        self._parent = parent

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _QtTimerHandle:
        from PyQt6.QtCore import QTimer  # type: ignore

        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setInterval(max(0, int(delay_ms)))
        handle = _QtTimerHandle(timer)

        def _fire() -> None:
            # Release the timer before running so a cancel() from inside is a no-op.
            handle.cancel()
            callback()

        timer.timeout.connect(_fire)  # type: ignore[attr-defined]
        timer.start()
        return handle
