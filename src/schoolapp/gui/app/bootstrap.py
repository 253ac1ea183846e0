"""Application bootstrap for the school administration client.

Responsibilities:
 - Logging configuration (once per process)
 - Optional headless bootstrap (for tests / environments without PyQt6)
 - Building the object graph explicitly: store, API client, event bus,
   notification bus, session controller, error handling service
 - Running the session bootstrap and returning one context object holding
   every reference plus the initial ``AppPhase``

The bootstrap deliberately avoids importing PyQt6 at module import time to keep
test collection fast and allow running unit tests in environments without a GUI.
"""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from schoolapp.config import settings
from schoolapp.core.http_client import ApiClient, EntityResource
from schoolapp.core.storage import PersistentStore
from schoolapp.domain.entities import get_entity
from schoolapp.domain.models import AppPhase
from schoolapp.gui.services.error_handling_service import ErrorHandlingService
from schoolapp.gui.services.event_bus import EventBus
from schoolapp.gui.services.notification_bus import NotificationBus
from schoolapp.gui.services.scheduling import QtScheduler, Scheduler, ThreadingScheduler
from schoolapp.gui.services.session_controller import SessionController
from schoolapp.gui.viewmodels.crud_viewmodel import CrudViewModel
from schoolapp.gui.viewmodels.dashboard_viewmodel import DashboardViewModel
from schoolapp.gui.viewmodels.login_viewmodel import LoginViewModel
from schoolapp.gui.viewmodels.profile_viewmodel import ProfileViewModel

from .timing import TimingLogger

try:  # Lazy / optional Qt import
    from PyQt6.QtWidgets import QApplication  # type: ignore

    _QT_AVAILABLE = True
except Exception:  # noqa: BLE001
    QApplication = None  # type: ignore
    _QT_AVAILABLE = False

__all__ = [
    "AppContext",
    "create_app",
    "configure_logging",
    "parse_data_dir",
    "LOG_FORMAT",
]

_log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_LOGGING_CONFIGURED = False


def configure_logging(level: str | int | None = None) -> None:
    """Install the root handler once; later calls only adjust the level."""
    global _LOGGING_CONFIGURED
    if level is None:
        level = settings.LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root = logging.getLogger()
    if not _LOGGING_CONFIGURED:
        logging.basicConfig(level=level, format=LOG_FORMAT)
        _LOGGING_CONFIGURED = True
    root.setLevel(level)


def parse_data_dir(argv: list[str] | None = None) -> str | None:
    """Parse ``--data-dir PATH`` / ``--data-dir=PATH`` from argv (non-destructive)."""
    args = argv if argv is not None else sys.argv[1:]
    for i, arg in enumerate(args):
        if arg.startswith("--data-dir="):
            return arg.split("=", 1)[1] or None
        if arg == "--data-dir" and i + 1 < len(args):
            return args[i + 1]
    return None


@dataclass
class AppContext:
    """Container with references created during bootstrap.

    Attributes
    ----------
    qt_app: The underlying QApplication instance (None if headless or Qt missing)
    headless: Whether headless bootstrap was used
    data_dir: Directory holding the persisted client state
    initial_phase: Result of ``SessionController.bootstrap()``
    started_at / duration_s: Bootstrap timing
    """

    qt_app: Optional[Any]
    headless: bool
    data_dir: Path
    store: PersistentStore
    api: ApiClient
    events: EventBus
    notifications: NotificationBus
    session: SessionController
    errors: ErrorHandlingService
    scheduler: Scheduler
    initial_phase: AppPhase
    started_at: float
    duration_s: float
    timing: TimingLogger
    metadata: dict[str, Any] = field(default_factory=dict)

    # View model factories ------------------------------------------------
    def crud_view_model(self, entity_key: str) -> CrudViewModel:
        definition = get_entity(entity_key)
        return CrudViewModel(
            definition,
            EntityResource(self.api, definition),
            self.notifications,
            self.scheduler,
            self.events,
        )

    def login_view_model(self) -> LoginViewModel:
        return LoginViewModel(self.session, self.notifications)

    def profile_view_model(self) -> ProfileViewModel:
        return ProfileViewModel(self.session, self.api, self.notifications)

    def dashboard_view_model(self) -> DashboardViewModel:
        return DashboardViewModel(self.api, self.notifications, self.events)

    def shutdown(self) -> None:
        self.errors.uninstall()


def create_app(
    *,
    headless: bool | None = None,
    data_dir: str | Path | None = None,
    api_client: ApiClient | None = None,
    store: PersistentStore | None = None,
    scheduler: Scheduler | None = None,
) -> AppContext:
    """Create and initialize the application context.

    Parameters
    ----------
    headless: Force headless (no QApplication). If None, inferred by Qt availability.
    data_dir: Where ``client_state.json`` lives. Defaults to ``settings.DATA_DIR``.
    api_client / store / scheduler: Injection points for tests.
    """
    started = time.perf_counter()
    if headless is None:
        headless = not _QT_AVAILABLE
    base_dir = Path(data_dir or settings.DATA_DIR)

    timing = TimingLogger()

    qt_app = None
    if not headless and _QT_AVAILABLE:
        with timing.measure("create_qapplication"):
            qt_app = QApplication.instance() or QApplication(sys.argv[:1])  # minimal argv

    with timing.measure("open_store"):
        if store is None:
            store = PersistentStore.in_directory(base_dir)
    with timing.measure("build_services"):
        if scheduler is None:
            scheduler = QtScheduler(qt_app) if qt_app is not None else ThreadingScheduler()
        api = api_client if api_client is not None else ApiClient()
        events = EventBus()
        notifications = NotificationBus(scheduler)
        session = SessionController(store, api, events)
        errors = ErrorHandlingService(event_bus=events, notifications=notifications)
        if not headless:
            errors.install()
    with timing.measure("session_bootstrap"):
        phase = session.bootstrap()

    timing.stop()
    _log.info("client started in phase %s (api=%s, data=%s)", phase.value, api.base_url, base_dir)

    return AppContext(
        qt_app=qt_app,
        headless=headless,
        data_dir=base_dir,
        store=store,
        api=api,
        events=events,
        notifications=notifications,
        session=session,
        errors=errors,
        scheduler=scheduler,
        initial_phase=phase,
        started_at=started,
        duration_s=timing.total_duration,
        timing=timing,
        metadata={
            "qt_available": _QT_AVAILABLE,
            "startup_timing": timing.as_dict(),
        },
    )
