"""Process-wide toast channel.

Any code (view models, the excepthook, controllers) can request a transient
message without holding a widget reference. The surface that renders toasts
(``ToastHost``) registers itself as the single live handler when mounted.

Rules:
 - Zero or one handler; a later ``subscribe`` replaces the earlier one
   (last mount wins). Cancelling a replaced subscription is a no-op.
 - ``publish`` with no handler logs and returns; it never raises or blocks.
 - At most one visible message. Publishing while one is visible cancels the
   pending dismiss timer before scheduling the new one; there is no queue.
 - The handler receives the ``ToastMessage`` on show and ``None`` on dismiss.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import RLock
from typing import Callable, List, Optional

from schoolapp.config import settings
from schoolapp.domain.models import ToastKind, ToastMessage
from schoolapp.gui.services.scheduling import Scheduler, ThreadingScheduler, TimerHandle

__all__ = ["NotificationBus", "ToastHandler", "ToastSubscription"]

_log = logging.getLogger(__name__)

ToastHandler = Callable[[Optional[ToastMessage]], None]


@dataclass
class ToastSubscription:
    bus: "NotificationBus"
    handler: ToastHandler
    active: bool = True

    def cancel(self) -> None:
        self.bus.unsubscribe(self)


class NotificationBus:
    def __init__(self, scheduler: Scheduler | None = None) -> None:
        self._scheduler: Scheduler = scheduler if scheduler is not None else ThreadingScheduler()
        self._lock = RLock()
        self._sub: Optional[ToastSubscription] = None
        self._timer: Optional[TimerHandle] = None
        self._current: Optional[ToastMessage] = None
        self._errors: List[tuple[Optional[ToastMessage], BaseException]] = []

    # ------------------------------------------------------------------
    # Subscription management
    # ------------------------------------------------------------------
    def subscribe(self, handler: ToastHandler) -> ToastSubscription:
        sub = ToastSubscription(bus=self, handler=handler)
        with self._lock:
            previous = self._sub
            self._sub = sub
        if previous is not None:
            previous.active = False
            _log.debug("toast handler replaced")
        return sub

    def unsubscribe(self, sub: ToastSubscription) -> None:
        with self._lock:
            if self._sub is sub:
                self._sub = None
                self._cancel_timer()
                self._current = None
        sub.active = False

    @property
    def has_subscriber(self) -> bool:
        with self._lock:
            return self._sub is not None

    @property
    def current(self) -> Optional[ToastMessage]:
        with self._lock:
            return self._current

    @property
    def errors(self) -> list[tuple[Optional[ToastMessage], BaseException]]:
        with self._lock:
            return list(self._errors)

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------
    def publish(
        self,
        text: str,
        kind: ToastKind = ToastKind.INFO,
        duration_ms: int = settings.TOAST_DURATION_MS,
    ) -> ToastMessage:
        message = ToastMessage(text=str(text), kind=ToastKind(kind), duration_ms=int(duration_ms))
        with self._lock:
            sub = self._sub
            if sub is None:
                _log.warning("toast dropped (no surface mounted): [%s] %s", message.kind.value, message.text)
                return message
            self._cancel_timer()
            self._current = message
        self._deliver(sub, message)
        with self._lock:
            # The handler may have unsubscribed or published again.
            if self._sub is sub and self._current is message and message.duration_ms > 0:
                self._timer = self._scheduler.call_later(
                    message.duration_ms, lambda: self._expire(message)
                )
        return message

    def info(self, text: str) -> ToastMessage:
        return self.publish(text, ToastKind.INFO)

    def success(self, text: str) -> ToastMessage:
        return self.publish(text, ToastKind.SUCCESS)

    def error(self, text: str) -> ToastMessage:
        return self.publish(text, ToastKind.ERROR)

    def dismiss(self) -> None:
        with self._lock:
            self._cancel_timer()
            if self._current is None:
                return
            self._current = None
            sub = self._sub
        if sub is not None:
            self._deliver(sub, None)

    # ------------------------------------------------------------------
    def _expire(self, message: ToastMessage) -> None:
        with self._lock:
            if self._current is not message:
                return  # preempted
            self._timer = None
            self._current = None
            sub = self._sub
        if sub is not None:
            self._deliver(sub, None)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _deliver(self, sub: ToastSubscription, message: Optional[ToastMessage]) -> None:
        if not sub.active:
            return
        try:
            sub.handler(message)
        except Exception as exc:  # noqa: BLE001 - a broken surface must not break publishers
            with self._lock:
                self._errors.append((message, exc))
            _log.exception("toast handler failed")
