"""Session lifecycle: cold-start phase selection, login and logout.

The controller owns the ``AppPhase`` state machine and is the only place that
mutates the bearer token. Every token change goes through ``_apply_token``
which updates the API client and the in-memory session together, so the two
can never disagree.

Boot is local only: a persisted token is trusted without asking the backend
(``refresh_profile`` is the explicit, opt-in server check).
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from schoolapp.config import settings
from schoolapp.core.errors import AuthError, InvalidTransitionError, TransportError, best_message
from schoolapp.core.http_client import LoginResult, mask_token
from schoolapp.core.storage import PersistentStore, StorageKey
from schoolapp.domain.models import AppPhase, Credentials, Session, UserProfile, can_transition
from schoolapp.domain.normalizer import extract_message
from schoolapp.gui.services.event_bus import AppEvent, EventBus

__all__ = ["SessionApi", "SessionController", "REJECTED_LOGIN_STATUSES"]

_log = logging.getLogger(__name__)

# Backend answers for bad credentials / validation failures on /login.
REJECTED_LOGIN_STATUSES = frozenset({401, 403, 422})

NOT_AUTHORIZED_MESSAGE = "You are not authorized to use this application."


class SessionApi(Protocol):
    """Subset of ``ApiClient`` the controller depends on."""

    def set_token(self, token: str) -> None: ...  # pragma: no cover - structural

    def clear_token(self) -> None: ...  # pragma: no cover - structural

    def login(self, email: str, password: str) -> LoginResult: ...  # pragma: no cover

    def logout(self) -> Any: ...  # pragma: no cover - structural

    def auth_check(self) -> dict: ...  # pragma: no cover - structural


class SessionController:
    def __init__(
        self,
        store: PersistentStore,
        api: SessionApi,
        events: EventBus | None = None,
        *,
        allowed_roles=settings.ALLOWED_ROLES,
    ) -> None:
        self._store = store
        self._api = api
        self._events = events if events is not None else EventBus()
        self._allowed_roles = frozenset(allowed_roles)
        self._phase = AppPhase.LOADING
        self._session = Session()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def phase(self) -> AppPhase:
        return self._phase

    @property
    def session(self) -> Session:
        return self._session

    @property
    def user(self) -> Optional[UserProfile]:
        return self._session.user

    @property
    def events(self) -> EventBus:
        return self._events

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def bootstrap(self) -> AppPhase:
        """Pick the initial phase from the persisted flag and token.

        No network call is made. Any unexpected failure lands on LOGIN.
        """
        if self._phase is not AppPhase.LOADING:
            raise InvalidTransitionError(f"bootstrap() called in phase {self._phase.value}")
        try:
            target = self._resolve_initial_phase()
        except Exception:  # noqa: BLE001 - boot must always reach a usable screen
            _log.exception("bootstrap failed; falling back to login")
            self._apply_token(None)
            target = AppPhase.LOGIN
        self._transition(target)
        if target is AppPhase.HOME:
            self._events.publish(AppEvent.SESSION_STARTED, self._session.user)
        return target

    def _resolve_initial_phase(self) -> AppPhase:
        if not self._store.get_flag(StorageKey.ONBOARDING_COMPLETED):
            return AppPhase.ONBOARDING
        token = self._store.get(StorageKey.AUTH_TOKEN)
        if not token:
            return AppPhase.LOGIN
        user = None
        cached = self._store.get_json(StorageKey.USER_DATA)
        if isinstance(cached, dict):
            user = UserProfile.from_payload(cached)
        self._apply_token(token, user)
        _log.info("restored session token=%s", mask_token(token))
        return AppPhase.HOME

    def complete_onboarding(self) -> AppPhase:
        self._require_phase(AppPhase.ONBOARDING, "complete_onboarding")
        self._store.set_flag(StorageKey.ONBOARDING_COMPLETED)
        self._transition(AppPhase.LOGIN)
        return self._phase

    def login(self, credentials: Credentials) -> Session:
        """Authenticate and start a session.

        Raises ``AuthError`` when the backend rejects the credentials, returns
        no usable token/user, or the user's role may not use this client.
        Other transport failures propagate as ``TransportError``. The API
        client never holds a token after a failed login.
        """
        self._require_phase(AppPhase.LOGIN, "login")
        email = credentials.email.strip()
        try:
            result = self._api.login(email, credentials.password)
        except TransportError as exc:
            self._apply_token(None)
            if exc.status in REJECTED_LOGIN_STATUSES:
                raise AuthError(best_message(exc, settings.INVALID_CREDENTIALS_MESSAGE)) from exc
            raise

        if not result.token or result.user is None:
            self._apply_token(None)
            raise AuthError(extract_message(result.raw) or settings.INVALID_CREDENTIALS_MESSAGE)
        user = UserProfile.from_payload(result.user)
        if user.role not in self._allowed_roles:
            self._apply_token(None)
            _log.info("login refused for %s: role %s (%s)", email, user.role, user.role_label)
            raise AuthError(NOT_AUTHORIZED_MESSAGE)

        self._store.set(StorageKey.AUTH_TOKEN, result.token)
        self._store.set_json(StorageKey.USER_DATA, user.to_payload())
        if credentials.remember_me:
            self._store.set(StorageKey.REMEMBER_ME, email)
        else:
            self._store.remove(StorageKey.REMEMBER_ME)
        self._apply_token(result.token, user)
        _log.info("login ok for %s (%s) token=%s", email, user.role_label, mask_token(result.token))
        self._transition(AppPhase.HOME)
        self._events.publish(AppEvent.SESSION_STARTED, user)
        return self._session

    def logout(self) -> None:
        """End the session. Safe to call repeatedly."""
        had_token = self._session.token is not None
        if had_token:
            try:
                self._api.logout()
            except Exception as exc:  # noqa: BLE001 - server-side logout is best-effort
                _log.warning("logout request failed: %s", exc)
        self._apply_token(None)
        self._store.remove(StorageKey.AUTH_TOKEN)
        self._store.remove(StorageKey.USER_DATA)
        if self._phase is AppPhase.HOME:
            self._transition(AppPhase.LOGIN)
        if had_token:
            self._events.publish(AppEvent.SESSION_ENDED, None)

    def remembered_email(self) -> Optional[str]:
        return self._store.get(StorageKey.REMEMBER_ME)

    def refresh_profile(self) -> Optional[UserProfile]:
        """Re-read the profile from ``/auth-check``.

        A 401 means the stored token is dead: the session is logged out and
        ``None`` returned. Other failures propagate.
        """
        if self._session.token is None:
            return None
        try:
            data = self._api.auth_check()
        except TransportError as exc:
            if exc.status == 401:
                _log.info("token rejected by auth-check; logging out")
                self.logout()
                return None
            raise
        payload = data.get("user") if isinstance(data.get("user"), dict) else data
        user = UserProfile.from_payload(payload)
        self._store.set_json(StorageKey.USER_DATA, user.to_payload())
        self._session = Session(token=self._session.token, user=user)
        return user

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _apply_token(self, token: Optional[str], user: Optional[UserProfile] = None) -> None:
        if token:
            self._api.set_token(token)
            self._session = Session(token=token, user=user)
        else:
            self._api.clear_token()
            self._session = Session()

    def _require_phase(self, expected: AppPhase, operation: str) -> None:
        if self._phase is not expected:
            raise InvalidTransitionError(
                f"{operation}() requires phase {expected.value}, current {self._phase.value}"
            )

    def _transition(self, target: AppPhase) -> None:
        previous = self._phase
        if not can_transition(previous, target):
            raise InvalidTransitionError(f"{previous.value} -> {target.value}")
        self._phase = target
        _log.debug("phase %s -> %s", previous.value, target.value)
        self._events.publish(AppEvent.PHASE_CHANGED, {"previous": previous, "phase": target})
