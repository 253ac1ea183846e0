"""Last-resort handler for exceptions that escape a Qt slot or worker thread.

View models only catch ``ClientError``; anything else propagates out of the
slot, lands in ``sys.excepthook`` (or ``threading.excepthook``) and ends up
here. The service logs the traceback, announces it on the event bus and shows
the user one Error toast. A ``ClientError`` that slipped through keeps its own
message; every other failure gets ``GENERIC_ERROR_TEXT``.

Hooks are only swapped by ``install()``; ``report()`` can be called directly,
which is what the tests do.
"""

from __future__ import annotations

import logging
import sys
import threading
import traceback
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Deque, List, Optional

from schoolapp.core.errors import ClientError, best_message
from schoolapp.domain.models import ToastKind
from schoolapp.gui.services.event_bus import AppEvent

if TYPE_CHECKING:  # pragma: no cover
    from schoolapp.gui.services.event_bus import EventBus
    from schoolapp.gui.services.notification_bus import NotificationBus

__all__ = ["CrashRecord", "ErrorHandlingService", "GENERIC_ERROR_TEXT"]

_log = logging.getLogger(__name__)

GENERIC_ERROR_TEXT = "Something went wrong. Please try again."


@dataclass(frozen=True)
class CrashRecord:
    error: BaseException
    details: str
    occurred_at: datetime
    thread: str
    shown_text: str

    @property
    def kind(self) -> str:
        return type(self.error).__name__


def _toast_text(error: BaseException) -> str:
    if isinstance(error, ClientError):
        return best_message(error, GENERIC_ERROR_TEXT)
    return GENERIC_ERROR_TEXT


class ErrorHandlingService:
    """Keeps the last ``history`` crashes and turns each into one toast.

    svc = ErrorHandlingService(event_bus=events, notifications=toasts)
    svc.install()
    ...
    svc.uninstall()
    """

    def __init__(
        self,
        *,
        history: int = 20,
        event_bus: Optional["EventBus"] = None,
        notifications: Optional["NotificationBus"] = None,
    ) -> None:
        self._crashes: Deque[CrashRecord] = deque(maxlen=max(1, history))
        self._event_bus = event_bus
        self._notifications = notifications
        # (sys hook, threading hook) in place before install()
        self._chained: Optional[tuple[Any, Any]] = None

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    @property
    def installed(self) -> bool:
        return self._chained is not None

    def install(self) -> None:
        if self._chained is not None:
            return
        self._chained = (sys.excepthook, threading.excepthook)
        sys.excepthook = self._on_uncaught
        threading.excepthook = self._on_thread_crash

    def uninstall(self) -> None:
        if self._chained is None:
            return
        sys.excepthook, threading.excepthook = self._chained
        self._chained = None

    def _on_uncaught(self, exc_type, exc_value, tb) -> None:  # pragma: no cover - hook
        if issubclass(exc_type, KeyboardInterrupt) and self._chained is not None:
            self._chained[0](exc_type, exc_value, tb)
            return
        self.report(exc_value, tb)

    def _on_thread_crash(self, args) -> None:  # pragma: no cover - hook
        if args.exc_value is not None:
            self.report(args.exc_value, args.exc_traceback, thread=args.thread)

    # ------------------------------------------------------------------
    def report(
        self, error: BaseException, tb=None, *, thread: Optional[threading.Thread] = None
    ) -> CrashRecord:
        if tb is None:
            tb = error.__traceback__
        details = "".join(traceback.format_exception(type(error), error, tb))
        record = CrashRecord(
            error=error,
            details=details,
            occurred_at=datetime.now(timezone.utc),
            thread=(thread or threading.current_thread()).name,
            shown_text=_toast_text(error),
        )
        self._crashes.append(record)
        _log.error("uncaught %s in thread %s\n%s", record.kind, record.thread, details)
        if self._event_bus is not None:
            self._event_bus.publish(
                AppEvent.UNCAUGHT_EXCEPTION,
                {
                    "type": record.kind,
                    "message": str(error),
                    "thread": record.thread,
                    "iso_time": record.occurred_at.isoformat(),
                },
            )
        if self._notifications is not None:
            self._notifications.publish(record.shown_text, ToastKind.ERROR)
        return record

    def recent(self) -> List[CrashRecord]:
        return list(self._crashes)
