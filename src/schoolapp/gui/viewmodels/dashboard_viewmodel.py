"""Home dashboard: headline counts, today's attendance and per-screen totals.

Counts come from the backend's settings summary endpoint. The view model
also listens on the event bus:
 - ``ENTITY_LIST_LOADED`` records how many rows each entity screen last
   showed, for the badges in the home menu.
 - ``ENTITY_MUTATED`` marks the summary stale so it is refetched when the
   user returns to the menu.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Tuple

from schoolapp.core.errors import ClientError, best_message
from schoolapp.domain.models import ToastKind
from schoolapp.domain.normalizer import unwrap_record
from schoolapp.gui.services.event_bus import AppEvent, Event, EventBus, Subscription
from schoolapp.gui.services.notification_bus import NotificationBus

__all__ = ["ATTENDANCE_LABELS", "DashboardCounts", "DashboardState", "DashboardViewModel"]

_log = logging.getLogger(__name__)

ATTENDANCE_LABELS = {"1": "Present", "2": "Absent", "3": "Late", "4": "Half Day"}


class DashboardApi(Protocol):
    def dashboard_counts(self, grade_id: Any = None) -> Any: ...  # pragma: no cover


def _count(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


@dataclass(frozen=True)
class DashboardCounts:
    students: int = 0
    passed_students: int = 0
    teachers: int = 0
    passed_teachers: int = 0
    staff: int = 0
    passed_staff: int = 0
    subjects: int = 0
    attendance: Tuple[Tuple[str, int], ...] = ()

    @classmethod
    def from_response(cls, response: Any) -> "DashboardCounts":
        data = unwrap_record(response)
        if not isinstance(data, Mapping):
            return cls()
        attendance: List[Tuple[str, int]] = []
        rows = data.get("todayAttendance")
        if isinstance(rows, list):
            for row in rows:
                if not isinstance(row, Mapping):
                    continue
                kind = str(row.get("attendance_type", ""))
                attendance.append((ATTENDANCE_LABELS.get(kind, f"Type {kind}"), _count(row.get("count"))))
        return cls(
            students=_count(data.get("totalStudent")),
            passed_students=_count(data.get("totalPassOutStudent")),
            teachers=_count(data.get("totalStaffTeacher")),
            passed_teachers=_count(data.get("totalPassOutTeacher")),
            staff=_count(data.get("totalStaff")),
            passed_staff=_count(data.get("totalPassOutStaff")),
            subjects=_count(data.get("totalSubjects")),
            attendance=tuple(attendance),
        )

    @property
    def attendance_total(self) -> int:
        return sum(count for _, count in self.attendance)


@dataclass
class DashboardState:
    counts: DashboardCounts = field(default_factory=DashboardCounts)
    grade_id: Any = None
    loading: bool = False
    loaded_once: bool = False
    stale: bool = False
    list_sizes: Dict[str, int] = field(default_factory=dict)


class DashboardViewModel:
    def __init__(self, api: DashboardApi, bus: NotificationBus, events: EventBus | None = None) -> None:
        self._api = api
        self._bus = bus
        self.state = DashboardState()
        self._listeners: List[Callable[[DashboardState], None]] = []
        self._subs: List[Subscription] = []
        if events is not None:
            self._subs.append(events.subscribe(AppEvent.ENTITY_LIST_LOADED, self._on_list_loaded))
            self._subs.append(events.subscribe(AppEvent.ENTITY_MUTATED, self._on_mutated))

    def add_listener(self, callback: Callable[[DashboardState], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for cb in list(self._listeners):
            cb(self.state)

    # ------------------------------------------------------------------
    def load(self, grade_id: Any = None) -> bool:
        self.state.grade_id = grade_id
        self.state.loading = True
        self._notify()
        try:
            response = self._api.dashboard_counts(grade_id)
        except ClientError as exc:
            message = best_message(exc, "Failed to load dashboard counts")
            _log.warning("dashboard counts failed: %s", message)
            self.state.loading = False
            self._bus.publish(message, ToastKind.ERROR)
            self._notify()
            return False
        self.state.counts = DashboardCounts.from_response(response)
        self.state.loading = False
        self.state.loaded_once = True
        self.state.stale = False
        self._notify()
        return True

    def refresh_if_stale(self) -> bool:
        if not self.state.stale:
            return False
        return self.load(self.state.grade_id)

    def list_size(self, entity_key: str) -> Optional[int]:
        return self.state.list_sizes.get(entity_key)

    # Event bus -----------------------------------------------------------
    def _on_list_loaded(self, event: Event) -> None:
        payload = event.payload or {}
        self.state.list_sizes[payload["entity"]] = payload["count"]
        self._notify()

    def _on_mutated(self, _event: Event) -> None:
        self.state.stale = True

    def close(self) -> None:
        for sub in self._subs:
            sub.cancel()
        self._subs.clear()
        self._listeners.clear()
