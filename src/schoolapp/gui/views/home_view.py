"""Authenticated home: settings menu, entity screens and profile.

Sub-pages live in an internal ``QStackedWidget``. Entity screens are built on
demand and torn down (view model unmounted) when the user navigates back, so
a pending delayed refetch never touches a closed screen.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from schoolapp.domain.entities import list_entities
from schoolapp.gui.viewmodels.dashboard_viewmodel import DashboardState
from schoolapp.gui.views.entity_view import EntityView
from schoolapp.gui.views.profile_view import ProfileView

if TYPE_CHECKING:  # pragma: no cover
    from schoolapp.gui.app.bootstrap import AppContext

__all__ = ["HomeView"]


class HomeView(QWidget):
    def __init__(self, ctx: "AppContext", parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._ctx = ctx
        self._page: Optional[QWidget] = None
        self.dashboard = ctx.dashboard_view_model()
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        self.stack = QStackedWidget()
        root.addWidget(self.stack)
        self.menu_page = self._build_menu()
        self.stack.addWidget(self.menu_page)
        self.dashboard.add_listener(self._render_dashboard)
        self.dashboard.load()

    def _build_menu(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        header = QHBoxLayout()
        user = self._ctx.session.user
        greeting = f"Hello, {user.name}" if user is not None and user.name else "Hello"
        self.greeting_label = QLabel(greeting)
        self.greeting_label.setObjectName("viewTitleLabel")
        self.role_label = QLabel(user.role_label if user is not None else "")
        header.addWidget(self.greeting_label)
        header.addWidget(self.role_label, 1)
        self.profile_button = QPushButton("Profile")
        self.profile_button.clicked.connect(self.open_profile)  # type: ignore
        self.logout_button = QPushButton("Logout")
        self.logout_button.clicked.connect(self._ctx.session.logout)  # type: ignore
        header.addWidget(self.profile_button)
        header.addWidget(self.logout_button)
        layout.addLayout(header)

        self.stats_label = QLabel("")
        self.stats_label.setObjectName("dashboardStats")
        self.stats_label.setWordWrap(True)
        layout.addWidget(self.stats_label)
        self.attendance_label = QLabel("")
        self.attendance_label.setWordWrap(True)
        layout.addWidget(self.attendance_label)

        layout.addWidget(QLabel("School Settings"))
        self.entity_list = QListWidget()
        self._labels: dict[str, str] = {}
        for definition in list_entities():
            item = QListWidgetItem(definition.label)
            self._labels[definition.key] = definition.label
            item.setData(Qt.ItemDataRole.UserRole, definition.key)
            self.entity_list.addItem(item)
        self.entity_list.itemActivated.connect(  # type: ignore
            lambda item: self.open_entity(item.data(Qt.ItemDataRole.UserRole))
        )
        layout.addWidget(self.entity_list, 1)
        return page

    # Navigation --------------------------------------------------------
    @property
    def current_page(self) -> Optional[QWidget]:
        return self._page

    def open_entity(self, key: str) -> EntityView:
        vm = self._ctx.crud_view_model(key)
        view = EntityView(vm, on_back=self.back)
        self._show(view)
        vm.load()
        return view

    def open_profile(self) -> ProfileView:
        view = ProfileView(self._ctx.profile_view_model(), on_back=self.back)
        self._show(view)
        return view

    def back(self) -> None:
        self._close_page()
        self.stack.setCurrentWidget(self.menu_page)
        self.dashboard.refresh_if_stale()

    def _show(self, page: QWidget) -> None:
        self._close_page()
        self._page = page
        self.stack.addWidget(page)
        self.stack.setCurrentWidget(page)

    def _close_page(self) -> None:
        page, self._page = self._page, None
        if page is None:
            return
        if isinstance(page, EntityView):
            page.viewmodel.unmount()
        self.stack.removeWidget(page)
        page.deleteLater()

    def teardown(self) -> None:
        self._close_page()
        self.dashboard.close()

    # Dashboard -----------------------------------------------------------
    def _render_dashboard(self, state: DashboardState) -> None:
        if state.loading and not state.loaded_once:
            self.stats_label.setText("Loading dashboard…")
        elif state.loaded_once:
            c = state.counts
            self.stats_label.setText(
                f"Students {c.students} (passed {c.passed_students})   "
                f"Teachers {c.teachers} (passed {c.passed_teachers})   "
                f"Staff {c.staff} (passed {c.passed_staff})   "
                f"Subjects {c.subjects}"
            )
        else:
            self.stats_label.setText("Dashboard unavailable")
        if state.counts.attendance:
            parts = [f"{label} {count}" for label, count in state.counts.attendance]
            self.attendance_label.setText(
                "Today: " + ", ".join(parts) + f"   Total: {state.counts.attendance_total} students"
            )
        else:
            self.attendance_label.setText("No attendance recorded today")
        for row in range(self.entity_list.count()):
            item = self.entity_list.item(row)
            key = item.data(Qt.ItemDataRole.UserRole)
            size = state.list_sizes.get(key)
            label = self._labels[key]
            item.setText(label if size is None else f"{label} ({size})")
