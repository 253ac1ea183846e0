"""Root window switching screens by ``AppPhase``.

The window listens for ``AppEvent.PHASE_CHANGED`` and rebuilds the page for
the new phase (login and home depend on session state, so they are never
reused). The ``ToastHost`` sits below the page stack for the window's
lifetime and is the notification bus's only surface.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QLabel, QMainWindow, QStackedWidget, QVBoxLayout, QWidget

from schoolapp.domain.models import AppPhase
from schoolapp.gui.components.toast_host import ToastHost
from schoolapp.gui.services.event_bus import AppEvent, Event
from schoolapp.gui.views.home_view import HomeView
from schoolapp.gui.views.login_view import LoginView
from schoolapp.gui.views.onboarding_view import OnboardingView

if TYPE_CHECKING:  # pragma: no cover
    from schoolapp.gui.app.bootstrap import AppContext

__all__ = ["RootWindow"]

_log = logging.getLogger(__name__)


class RootWindow(QMainWindow):
    def __init__(self, ctx: "AppContext", parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._ctx = ctx
        self.setWindowTitle("SchoolApp Admin")
        self.resize(960, 720)
        central = QWidget()
        layout = QVBoxLayout(central)
        self.stack = QStackedWidget()
        layout.addWidget(self.stack, 1)
        self.toast_host = ToastHost(ctx.notifications)
        layout.addWidget(self.toast_host)
        self.setCentralWidget(central)

        self._page: Optional[QWidget] = None
        self.phase = AppPhase.LOADING
        self._sub = ctx.events.subscribe(AppEvent.PHASE_CHANGED, self._on_phase_changed)
        self.show_phase(ctx.session.phase)

    # ------------------------------------------------------------------
    def _on_phase_changed(self, event: Event) -> None:
        self.show_phase(event.payload["phase"])

    def show_phase(self, phase: AppPhase) -> QWidget:
        self.phase = phase
        page = self._build_page(phase)
        old, self._page = self._page, page
        self.stack.addWidget(page)
        self.stack.setCurrentWidget(page)
        if old is not None:
            if isinstance(old, HomeView):
                old.teardown()
            self.stack.removeWidget(old)
            old.deleteLater()
        _log.debug("showing %s page", phase.value)
        return page

    @property
    def page(self) -> Optional[QWidget]:
        return self._page

    def _build_page(self, phase: AppPhase) -> QWidget:
        ctx = self._ctx
        if phase is AppPhase.ONBOARDING:
            return OnboardingView(ctx.session.complete_onboarding)
        if phase is AppPhase.LOGIN:
            return LoginView(ctx.login_view_model())
        if phase is AppPhase.HOME:
            return HomeView(ctx)
        label = QLabel("Loading…")
        label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        return label

    def closeEvent(self, event):  # type: ignore[override]
        self._sub.cancel()
        if isinstance(self._page, HomeView):
            self._page.teardown()
        self.toast_host.close()
        super().closeEvent(event)
