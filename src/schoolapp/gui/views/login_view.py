"""Login form bound to ``LoginViewModel``."""

from __future__ import annotations

from typing import Optional

from PyQt6.QtWidgets import (
    QCheckBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from schoolapp.gui.viewmodels.login_viewmodel import LoginViewModel

__all__ = ["LoginView"]


class LoginView(QWidget):
    def __init__(self, viewmodel: LoginViewModel, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.viewmodel = viewmodel
        self._build_ui()

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.addStretch(1)
        title = QLabel("Welcome Back")
        title.setObjectName("viewTitleLabel")
        root.addWidget(title)
        root.addWidget(QLabel("Sign in to your SchoolApp account"))

        form = QFormLayout()
        state = self.viewmodel.state
        self.email_edit = QLineEdit(state.email)
        self.email_edit.setPlaceholderText("Enter your email")
        self.password_edit = QLineEdit()
        self.password_edit.setEchoMode(QLineEdit.EchoMode.Password)
        self.password_edit.setPlaceholderText("Enter your password")
        self.password_edit.returnPressed.connect(self.submit)  # type: ignore
        self.remember_box = QCheckBox("Remember me")
        self.remember_box.setChecked(state.remember_me)
        form.addRow("Email", self.email_edit)
        form.addRow("Password", self.password_edit)
        form.addRow("", self.remember_box)
        root.addLayout(form)

        self.error_label = QLabel("")
        self.error_label.setObjectName("formErrorLabel")
        self.error_label.hide()
        root.addWidget(self.error_label)

        self.submit_button = QPushButton("Sign In")
        self.submit_button.clicked.connect(self.submit)  # type: ignore
        root.addWidget(self.submit_button)
        root.addStretch(2)

    def submit(self) -> bool:
        state = self.viewmodel.state
        state.email = self.email_edit.text()
        state.password = self.password_edit.text()
        state.remember_me = self.remember_box.isChecked()
        self.submit_button.setEnabled(False)
        try:
            ok = self.viewmodel.submit()
        finally:
            self.submit_button.setEnabled(True)
        if ok:
            self.password_edit.clear()
            self.error_label.hide()
        else:
            self.error_label.setText(state.error or "")
            self.error_label.setVisible(bool(state.error))
        return ok
