"""Generic list + single-form view model for the administration screens.

One instance backs one entity screen. It is driven entirely by an
``EntityDefinition`` (candidate list paths, form fields, status field,
delete refetch delay) and talks to the backend through an
``EntityResource``.

Design:
 - Pull-only model: explicit ``load()`` populates ``state.items``.
 - Runs on the UI thread; the only deferred work is the delayed refetch
   after deletes on lag-prone entities, scheduled through the injected
   ``Scheduler`` and cancelled by ``unmount()``.
 - Client errors (transport, validation) end as a single Error toast and
   never propagate to the view.
 - Results that arrive after ``unmount()`` are discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from schoolapp.core.errors import ClientError, ValidationError, best_message
from schoolapp.domain.entities import EntityDefinition
from schoolapp.domain.models import ToastKind
from schoolapp.domain.normalizer import coerce_flag, extract_message, normalize
from schoolapp.gui.services.event_bus import AppEvent, EventBus
from schoolapp.gui.services.notification_bus import NotificationBus
from schoolapp.gui.services.scheduling import Scheduler, ThreadingScheduler, TimerHandle

__all__ = ["CrudState", "CrudViewModel", "EntityGateway"]

_log = logging.getLogger(__name__)


class EntityGateway(Protocol):
    """What the view model needs from ``EntityResource``."""

    def list(self, params: Mapping[str, Any] | None = None) -> Any: ...  # pragma: no cover

    def create(self, payload: Mapping[str, Any]) -> Any: ...  # pragma: no cover

    def update(self, record_id: Any, payload: Mapping[str, Any]) -> Any: ...  # pragma: no cover

    def delete(self, record_id: Any) -> Any: ...  # pragma: no cover


@dataclass
class CrudState:
    items: List[Any] = field(default_factory=list)
    form: Dict[str, Any] = field(default_factory=dict)
    editing_id: Any = None
    loading: bool = False
    submitting: bool = False
    loaded_once: bool = False
    error: Optional[str] = None

    @property
    def editing(self) -> bool:
        return self.editing_id is not None


class CrudViewModel:
    def __init__(
        self,
        definition: EntityDefinition,
        resource: EntityGateway,
        bus: NotificationBus,
        scheduler: Scheduler | None = None,
        events: EventBus | None = None,
    ) -> None:
        self.definition = definition
        self._resource = resource
        self._bus = bus
        self._scheduler: Scheduler = scheduler if scheduler is not None else ThreadingScheduler()
        self._events = events
        self._mounted = True
        self._pending_refetch: Optional[TimerHandle] = None
        self._listeners: List[Callable[[CrudState], None]] = []
        self.state = CrudState(form=definition.default_form())

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def refetch_pending(self) -> bool:
        return self._pending_refetch is not None

    def add_listener(self, callback: Callable[[CrudState], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for cb in list(self._listeners):
            cb(self.state)

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------
    def load(self) -> bool:
        if not self._mounted:
            return False
        self.state.loading = True
        self.state.error = None
        self._notify()
        try:
            envelope = self._resource.list()
        except ClientError as exc:
            if not self._mounted:
                return False
            message = best_message(exc, f"Failed to load {self.definition.label.lower()} list")
            _log.warning("%s list failed: %s", self.definition.key, message)
            self.state.loading = False
            self.state.error = message
            if not self.state.loaded_once:
                self.state.items = []
            self._bus.publish(message, ToastKind.ERROR)
            self._notify()
            return False
        if not self._mounted:
            return False
        self.state.items = normalize(envelope, self.definition.list_paths)
        self.state.loading = False
        self.state.loaded_once = True
        if self._events is not None:
            self._events.publish(
                AppEvent.ENTITY_LIST_LOADED,
                {"entity": self.definition.key, "count": len(self.state.items)},
            )
        self._notify()
        return True

    def is_active(self, record: Mapping[str, Any]) -> bool:
        if not self.definition.status_field:
            return True
        return coerce_flag(record.get(self.definition.status_field))

    def title_of(self, record: Mapping[str, Any]) -> str:
        value = record.get(self.definition.title_field)
        return "" if value is None else str(value)

    # ------------------------------------------------------------------
    # Form
    # ------------------------------------------------------------------
    def set_field(self, name: str, value: Any) -> None:
        self.state.form[name] = value

    def begin_edit(self, record: Mapping[str, Any]) -> None:
        self.state.form = self.definition.form_from_record(record)
        self.state.editing_id = record.get("id")
        self._notify()

    def reset_form(self) -> None:
        self.state.form = self.definition.default_form()
        self.state.editing_id = None
        self._notify()

    def submit(self) -> bool:
        """Create or update from the form. Returns True on success."""
        if not self._mounted or self.state.submitting:
            return False
        try:
            self.definition.validate(self.state.form)
        except ValidationError as exc:
            self._bus.publish(exc.message, ToastKind.ERROR)
            return False
        payload = self.definition.build_payload(self.state.form)
        record_id = self.state.editing_id
        label = self.definition.label
        self.state.submitting = True
        self._notify()
        try:
            if record_id is not None:
                response = self._resource.update(record_id, payload)
            else:
                response = self._resource.create(payload)
        except ClientError as exc:
            self.state.submitting = False
            if not self._mounted:
                return False
            self._bus.publish(best_message(exc, f"Failed to save {label.lower()}"), ToastKind.ERROR)
            self._notify()
            return False
        self.state.submitting = False
        if not self._mounted:
            return False
        action = "updated" if record_id is not None else "added"
        self._bus.publish(
            extract_message(response) or f"{label} {action} successfully", ToastKind.SUCCESS
        )
        self._mutated(action)
        self.reset_form()
        self.load()
        return True

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------
    def delete(self, record: Mapping[str, Any] | Any) -> bool:
        record_id = record.get("id") if isinstance(record, Mapping) else record
        label = self.definition.label
        if not self._mounted or record_id is None:
            return False
        try:
            response = self._resource.delete(record_id)
        except ClientError as exc:
            if not self._mounted:
                return False
            self._bus.publish(best_message(exc, f"Failed to delete {label.lower()}"), ToastKind.ERROR)
            return False
        if not self._mounted:
            return False
        self._bus.publish(extract_message(response) or f"{label} deleted successfully", ToastKind.SUCCESS)
        self._mutated("deleted")
        if self.state.editing_id == record_id:
            self.reset_form()
        delay = self.definition.refetch_delay_ms
        if delay > 0:
            self._schedule_refetch(delay)
        else:
            self.load()
        return True

    def _schedule_refetch(self, delay_ms: int) -> None:
        self._cancel_refetch()
        self._pending_refetch = self._scheduler.call_later(delay_ms, self._delayed_refetch)

    def _delayed_refetch(self) -> None:
        self._pending_refetch = None
        if self._mounted:
            self.load()

    def _cancel_refetch(self) -> None:
        if self._pending_refetch is not None:
            self._pending_refetch.cancel()
            self._pending_refetch = None

    def _mutated(self, action: str) -> None:
        if self._events is not None:
            self._events.publish(
                AppEvent.ENTITY_MUTATED, {"entity": self.definition.key, "action": action}
            )

    # ------------------------------------------------------------------
    def unmount(self) -> None:
        self._mounted = False
        self._cancel_refetch()
        self._listeners.clear()
