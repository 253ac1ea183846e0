"""Login form state, validation and submission."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from schoolapp.core.errors import AuthError, TransportError, ValidationError, best_message
from schoolapp.domain.models import Credentials, ToastKind
from schoolapp.domain.validation import check_email, check_password
from schoolapp.gui.services.notification_bus import NotificationBus
from schoolapp.gui.services.session_controller import SessionController

__all__ = ["LoginState", "LoginViewModel", "LOGIN_SUCCESS_TEXT"]

_log = logging.getLogger(__name__)

LOGIN_SUCCESS_TEXT = "Login successful"


@dataclass
class LoginState:
    email: str = ""
    password: str = ""
    remember_me: bool = False
    submitting: bool = False
    error: str | None = None
    error_field: str | None = None


class LoginViewModel:
    def __init__(self, session: SessionController, bus: NotificationBus) -> None:
        self._session = session
        self._bus = bus
        remembered = session.remembered_email()
        self.state = LoginState(email=remembered or "", remember_me=remembered is not None)

    def validate(self) -> bool:
        try:
            check_email(self.state.email)
            check_password(self.state.password)
        except ValidationError as exc:
            self.state.error = exc.message
            self.state.error_field = exc.field
            self._bus.publish(exc.message, ToastKind.ERROR)
            return False
        self.state.error = None
        self.state.error_field = None
        return True

    def submit(self) -> bool:
        if self.state.submitting or not self.validate():
            return False
        credentials = Credentials(
            email=self.state.email.strip(),
            password=self.state.password,
            remember_me=self.state.remember_me,
        )
        self.state.submitting = True
        try:
            self._session.login(credentials)
        except (AuthError, TransportError) as exc:
            message = best_message(exc)
            _log.info("login failed: %s", message)
            self.state.error = message
            self.state.error_field = None
            self._bus.publish(message, ToastKind.ERROR)
            return False
        finally:
            self.state.submitting = False
        self.state.password = ""
        self._bus.publish(LOGIN_SUCCESS_TEXT, ToastKind.SUCCESS)
        return True
