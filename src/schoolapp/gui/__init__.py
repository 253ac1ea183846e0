"""SchoolApp GUI public API.

Curated, intentionally small surface: bootstrap helpers and the service
layer. Widgets are imported from their modules directly so importing this
package never requires PyQt6.
"""

from __future__ import annotations

from .app.bootstrap import AppContext, configure_logging, create_app  # noqa: F401
from .services.event_bus import AppEvent, Event, EventBus  # noqa: F401
from .services.notification_bus import NotificationBus  # noqa: F401
from .services.session_controller import SessionController  # noqa: F401

__all__ = [
    "AppContext",
    "configure_logging",
    "create_app",
    "AppEvent",
    "Event",
    "EventBus",
    "NotificationBus",
    "SessionController",
]
