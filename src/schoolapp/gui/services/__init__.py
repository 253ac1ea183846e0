"""Service layer exports.

Responsibilities:
 - EventBus publish/subscribe for application lifecycle events
 - NotificationBus single-slot toast channel
 - SessionController phase state machine and token ownership
 - Timer scheduling (Qt / threading) shared by the above

Services are wired explicitly by ``gui.app.bootstrap.create_app``; there is
no global registry.
"""

from .event_bus import AppEvent, Event, EventBus, Subscription  # noqa: F401
from .notification_bus import NotificationBus, ToastSubscription  # noqa: F401
from .scheduling import QtScheduler, Scheduler, ThreadingScheduler  # noqa: F401
from .session_controller import SessionController  # noqa: F401
from .error_handling_service import ErrorHandlingService  # noqa: F401

__all__ = [
    "AppEvent",
    "Event",
    "EventBus",
    "Subscription",
    "NotificationBus",
    "ToastSubscription",
    "QtScheduler",
    "Scheduler",
    "ThreadingScheduler",
    "SessionController",
    "ErrorHandlingService",
]
