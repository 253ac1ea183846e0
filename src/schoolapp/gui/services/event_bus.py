"""Application lifecycle events.

Fan-out counterpart to the single-slot ``NotificationBus``: the root window
follows ``PHASE_CHANGED``, the error service reports ``UNCAUGHT_EXCEPTION``,
screens announce list loads and mutations. Dispatch is synchronous on the
caller's thread. A handler that raises is logged and recorded in
``failures``; the remaining handlers still run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from threading import RLock
from time import monotonic
from typing import Any, Callable, Dict, List, Tuple

__all__ = ["AppEvent", "Event", "EventBus", "Handler", "Subscription"]

_log = logging.getLogger(__name__)


class AppEvent(str, Enum):
    PHASE_CHANGED = "phase_changed"  # {"previous": AppPhase, "phase": AppPhase}
    SESSION_STARTED = "session_started"  # UserProfile
    SESSION_ENDED = "session_ended"
    ENTITY_LIST_LOADED = "entity_list_loaded"  # {"entity": key, "count": n}
    ENTITY_MUTATED = "entity_mutated"  # {"entity": key, "action": str}
    UNCAUGHT_EXCEPTION = "uncaught_exception"


@dataclass(frozen=True)
class Event:
    name: str
    payload: Any = None
    at: float = field(default_factory=monotonic)


Handler = Callable[[Event], None]


@dataclass(eq=False)
class Subscription:
    bus: "EventBus"
    event: str
    handler: Handler
    once: bool = False
    active: bool = True

    def cancel(self) -> None:
        self.bus.unsubscribe(self)


def _event_name(name: str | AppEvent) -> str:
    return name.value if isinstance(name, AppEvent) else str(name)


class EventBus:
    def __init__(self) -> None:
        self._lock = RLock()
        self._handlers: Dict[str, List[Subscription]] = {}
        self._failures: List[Tuple[Event, BaseException]] = []

    def subscribe(self, name: str | AppEvent, handler: Handler, *, once: bool = False) -> Subscription:
        sub = Subscription(self, _event_name(name), handler, once)
        with self._lock:
            self._handlers.setdefault(sub.event, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        sub.active = False
        with self._lock:
            remaining = [s for s in self._handlers.get(sub.event, []) if s is not sub]
            if remaining:
                self._handlers[sub.event] = remaining
            else:
                self._handlers.pop(sub.event, None)

    def publish(self, name: str | AppEvent, payload: Any = None) -> Event:
        event = Event(_event_name(name), payload)
        with self._lock:
            targets = list(self._handlers.get(event.name, []))
        for sub in targets:
            # a handler earlier in this dispatch may have cancelled it
            if not sub.active:
                continue
            if sub.once:
                self.unsubscribe(sub)
            self._call(sub, event)
        return event

    def _call(self, sub: Subscription, event: Event) -> None:
        try:
            sub.handler(event)
        except Exception as exc:  # noqa: BLE001
            with self._lock:
                self._failures.append((event, exc))
            _log.exception("handler for %s raised", event.name)

    def subscriber_count(self, name: str | AppEvent) -> int:
        with self._lock:
            return len(self._handlers.get(_event_name(name), []))

    @property
    def failures(self) -> List[Tuple[Event, BaseException]]:
        with self._lock:
            return list(self._failures)
