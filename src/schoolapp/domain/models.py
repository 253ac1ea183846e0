"""Session and notification data types shared across layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional

from schoolapp.config import settings

__all__ = [
    "AppPhase",
    "PHASE_TRANSITIONS",
    "can_transition",
    "ToastKind",
    "ToastMessage",
    "UserProfile",
    "Credentials",
    "Session",
    "role_label",
]


class AppPhase(str, Enum):
    """Top-level UI mode driving the root view."""

    LOADING = "loading"
    ONBOARDING = "onboarding"
    LOGIN = "login"
    HOME = "home"


PHASE_TRANSITIONS: Mapping[AppPhase, FrozenSet[AppPhase]] = {
    AppPhase.LOADING: frozenset({AppPhase.ONBOARDING, AppPhase.LOGIN, AppPhase.HOME}),
    AppPhase.ONBOARDING: frozenset({AppPhase.LOGIN}),
    AppPhase.LOGIN: frozenset({AppPhase.HOME}),
    AppPhase.HOME: frozenset({AppPhase.LOGIN}),
}


def can_transition(current: AppPhase, target: AppPhase) -> bool:
    return target in PHASE_TRANSITIONS.get(current, frozenset())


class ToastKind(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class ToastMessage:
    text: str
    kind: ToastKind = ToastKind.INFO
    duration_ms: int = settings.TOAST_DURATION_MS


@dataclass(frozen=True)
class UserProfile:
    """Last-known authenticated identity.

    ``raw`` keeps the full backend payload so role-specific details
    (student/teacher blocks, permissions) survive a restart.
    """

    id: Any = None
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserProfile":
        data = dict(payload)
        role = data.get("role")
        if role is None and isinstance(data.get("raw"), Mapping):
            role = data["raw"].get("role")
        try:
            role = int(role) if role is not None and str(role).strip() != "" else None
        except (TypeError, ValueError):
            role = None
        return cls(
            id=data.get("id", data.get("user_id")),
            name=data.get("name"),
            email=data.get("email"),
            role=role,
            raw=data,
        )

    def to_payload(self) -> Dict[str, Any]:
        data = dict(self.raw)
        data.setdefault("id", self.id)
        data.setdefault("name", self.name)
        data.setdefault("email", self.email)
        data["role"] = self.role
        return data

    @property
    def role_label(self) -> str:
        return role_label(self.role)


def role_label(role: Optional[int]) -> str:
    label = settings.ROLE_LABELS.get(role) if role is not None else None
    return label or f"Role {role if role is not None else 'N/A'}"


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str
    remember_me: bool = False

    def __repr__(self) -> str:  # keep passwords out of logs
        return f"Credentials(email={self.email!r}, remember_me={self.remember_me})"


@dataclass(frozen=True)
class Session:
    token: Optional[str] = None
    user: Optional[UserProfile] = None

    @property
    def authenticated(self) -> bool:
        return self.token is not None
