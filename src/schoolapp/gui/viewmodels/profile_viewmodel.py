"""Profile screen: current user summary and password change."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from schoolapp.core.errors import ClientError, ValidationError, best_message
from schoolapp.domain.models import ToastKind, UserProfile
from schoolapp.domain.normalizer import extract_message
from schoolapp.domain.validation import check_password, is_blank
from schoolapp.gui.services.notification_bus import NotificationBus
from schoolapp.gui.services.session_controller import SessionController

__all__ = ["ProfileViewModel"]


class PasswordApi(Protocol):
    def change_password(self, current_password: str, new_password: str) -> Any: ...  # pragma: no cover


class ProfileViewModel:
    def __init__(self, session: SessionController, api: PasswordApi, bus: NotificationBus) -> None:
        self._session = session
        self._api = api
        self._bus = bus
        self.submitting = False

    @property
    def user(self) -> Optional[UserProfile]:
        return self._session.user

    def summary(self) -> dict[str, str]:
        user = self.user
        if user is None:
            return {"name": "", "email": "", "role": ""}
        return {"name": user.name or "", "email": user.email or "", "role": user.role_label}

    def change_password(self, current: str, new: str, confirm: str) -> bool:
        if self.submitting:
            return False
        try:
            if is_blank(current):
                raise ValidationError("Current password is required", field="current")
            check_password(new, field="new", label="New password")
            if new != confirm:
                raise ValidationError("Passwords do not match", field="confirm")
        except ValidationError as exc:
            self._bus.publish(exc.message, ToastKind.ERROR)
            return False
        self.submitting = True
        try:
            response = self._api.change_password(current, new)
        except ClientError as exc:
            self._bus.publish(best_message(exc, "Failed to change password"), ToastKind.ERROR)
            return False
        finally:
            self.submitting = False
        self._bus.publish(
            extract_message(response) or "Password changed successfully", ToastKind.SUCCESS
        )
        return True

    def logout(self) -> None:
        self._session.logout()
