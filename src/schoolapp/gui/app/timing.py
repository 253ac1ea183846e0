"""Startup timing instrumentation.

Collects named phase durations while ``create_app`` builds the object graph
(store, API client, services, QApplication) so slow startup phases show up
in the log.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from time import perf_counter
from typing import Iterator, List

__all__ = ["StartupPhase", "TimingLogger"]

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartupPhase:
    name: str
    started: float
    finished: float
    failed: bool = False

    @property
    def duration(self) -> float:
        return self.finished - self.started


class TimingLogger:
    """Records sequential, non-overlapping phases.

    Usage:
        t = TimingLogger()
        with t.measure("open_store"):
            ...
        t.stop()
    """

    def __init__(self) -> None:
        self._started_at = perf_counter()
        self._stopped_at: float | None = None
        self._events: List[StartupPhase] = []
        self._active: str | None = None

    @contextmanager
    def measure(self, name: str) -> Iterator[None]:
        if self._stopped_at is not None:
            raise RuntimeError("TimingLogger already stopped")
        if self._active is not None:
            raise RuntimeError(f"Phase '{name}' started while '{self._active}' still active")
        self._active = name
        started = perf_counter()
        failed = True
        try:
            yield
            failed = False
        finally:
            self._events.append(StartupPhase(name, started, perf_counter(), failed))
            self._active = None

    def stop(self) -> None:
        if self._stopped_at is None:
            self._stopped_at = perf_counter()
            _log.debug(
                "startup finished in %.1f ms (%s)",
                self.total_duration * 1000,
                ", ".join(f"{e.name}={e.duration * 1000:.1f}ms" for e in self._events),
            )

    @property
    def events(self) -> List[StartupPhase]:
        return list(self._events)

    @property
    def total_duration(self) -> float:
        end = self._stopped_at if self._stopped_at is not None else perf_counter()
        return end - self._started_at

    def as_dict(self) -> dict:
        return {
            "total_duration": self.total_duration,
            "events": [
                {"name": e.name, "duration": e.duration, "failed": e.failed} for e in self._events
            ],
        }

    def __iter__(self) -> Iterator[StartupPhase]:
        return iter(self._events)
