"""Profile page: identity summary and password change form."""

from __future__ import annotations

from typing import Callable, Optional

from PyQt6.QtWidgets import (
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from schoolapp.gui.viewmodels.profile_viewmodel import ProfileViewModel

__all__ = ["ProfileView"]


class ProfileView(QWidget):
    def __init__(
        self,
        viewmodel: ProfileViewModel,
        parent: Optional[QWidget] = None,
        *,
        on_back: Callable[[], None] | None = None,
    ):
        super().__init__(parent)
        self.viewmodel = viewmodel
        root = QVBoxLayout(self)
        header = QHBoxLayout()
        if on_back is not None:
            back = QPushButton("← Back")
            back.clicked.connect(on_back)  # type: ignore
            header.addWidget(back)
        title = QLabel("Profile")
        title.setObjectName("viewTitleLabel")
        header.addWidget(title, 1)
        root.addLayout(header)

        summary = viewmodel.summary()
        info = QFormLayout()
        self.name_label = QLabel(summary["name"])
        self.email_label = QLabel(summary["email"])
        self.role_label = QLabel(summary["role"])
        info.addRow("Name", self.name_label)
        info.addRow("Email", self.email_label)
        info.addRow("Role", self.role_label)
        root.addLayout(info)

        box = QGroupBox("Change Password")
        form = QFormLayout(box)
        self.current_edit = self._password_field("Current password")
        self.new_edit = self._password_field("New password")
        self.confirm_edit = self._password_field("Confirm new password")
        form.addRow("Current Password", self.current_edit)
        form.addRow("New Password", self.new_edit)
        form.addRow("Confirm New Password", self.confirm_edit)
        self.change_button = QPushButton("Change Password")
        self.change_button.clicked.connect(self.change_password)  # type: ignore
        form.addRow(self.change_button)
        root.addWidget(box)

        self.logout_button = QPushButton("Logout")
        self.logout_button.clicked.connect(self.viewmodel.logout)  # type: ignore
        root.addWidget(self.logout_button)
        root.addStretch(1)

    @staticmethod
    def _password_field(placeholder: str) -> QLineEdit:
        edit = QLineEdit()
        edit.setEchoMode(QLineEdit.EchoMode.Password)
        edit.setPlaceholderText(placeholder)
        return edit

    def change_password(self) -> bool:
        ok = self.viewmodel.change_password(
            self.current_edit.text(), self.new_edit.text(), self.confirm_edit.text()
        )
        if ok:
            for edit in (self.current_edit, self.new_edit, self.confirm_edit):
                edit.clear()
        return ok
