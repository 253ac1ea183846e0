"""JSON API client for the school-management backend.

Thin layer over ``urllib.request``: attaches the bearer token, encodes JSON
bodies, decodes JSON responses (tolerating non-JSON error pages) and maps
failures to ``TransportError`` with the best human-readable message.
Envelopes are returned untouched; list extraction belongs to the normalizer.

There is no retry policy; the user re-triggers a failed action.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from schoolapp.config import settings
from schoolapp.core.errors import TransportError
from schoolapp.domain.entities import EntityDefinition
from schoolapp.domain.normalizer import resolve_path

__all__ = [
    "ENDPOINTS",
    "ApiClient",
    "EntityResource",
    "LoginResult",
    "mask_token",
]

_log = logging.getLogger(__name__)

ENDPOINTS: Dict[str, str] = {
    "LOGIN": "/login",
    "AUTH_CHECK": "/auth-check",
    "CHANGE_PASSWORD": "/change-password",
    "LOGOUT": "/auth/logout",
    "DASHBOARD_COUNT": "/admin/settings/count",
}

Opener = Callable[..., Any]


def mask_token(token: Optional[str]) -> str:
    if not token:
        return "<none>"
    return token[:6] + "..." if len(token) > 6 else "***"


@dataclass(frozen=True)
class LoginResult:
    raw: Any
    token: Optional[str]
    user: Optional[Dict[str, Any]]


_TOKEN_PATHS = (("token",), ("access_token",), ("data", "token"), ("auth", "token"))
_USER_PATHS = (("user",), ("data", "user"))
_USER_MARKERS = ("id", "role")


def _first_present(envelope: Any, paths) -> Any:
    for path in paths:
        value = resolve_path(envelope, path)
        if isinstance(value, (str, dict)) and value:
            return value
    return None


def _login_user(envelope: Any) -> Optional[Dict[str, Any]]:
    user = _first_present(envelope, _USER_PATHS)
    if isinstance(user, dict):
        return user
    # bare ``data`` only counts when it looks like a user record
    data = resolve_path(envelope, ("data",))
    if isinstance(data, dict) and any(k in data for k in _USER_MARKERS):
        return data
    return None


class ApiClient:
    """Stateful HTTP client holding the current bearer token."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        opener: Opener | None = None,
    ) -> None:
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT_S
        self._opener: Opener = opener or urllib.request.urlopen
        self._token: Optional[str] = None

    # ------------------------------------------------------------------
    # Token state
    # ------------------------------------------------------------------
    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token

    def clear_token(self) -> None:
        self._token = None

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def request(
        self,
        method: str,
        endpoint: str,
        *,
        data: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        if params:
            query = urllib.parse.urlencode({k: v for k, v in params.items() if v is not None})
            if query:
                url = f"{url}?{query}"
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        body = json.dumps(data).encode("utf-8") if data is not None else None
        req = urllib.request.Request(url, data=body, headers=headers, method=method.upper())
        _log.debug("%s %s (token=%s)", method.upper(), url, mask_token(self._token))
        try:
            with self._opener(req, timeout=self.timeout) as resp:
                raw_text = resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as e:
            raw_text = ""
            try:
                raw_text = e.read().decode("utf-8", errors="replace")
            except Exception:  # noqa: BLE001 - body is optional on error responses
                pass
            parsed = self._parse(raw_text, url, e.code)
            message = None
            if isinstance(parsed, dict):
                message = parsed.get("message") or parsed.get("error")
            raise TransportError(
                str(message or raw_text or settings.UNKNOWN_ERROR_MESSAGE),
                status=e.code,
                data=parsed if parsed is not None else raw_text,
            ) from e
        except (urllib.error.URLError, OSError) as e:
            raise TransportError(settings.NETWORK_ERROR_MESSAGE, status=0) from e
        return self._parse(raw_text, url, 200)

    @staticmethod
    def _parse(raw_text: str, url: str, status: int) -> Any:
        if not raw_text:
            return None
        try:
            return json.loads(raw_text)
        except ValueError:
            _log.warning("Non-JSON response received for %s status %s: %s", url, status, raw_text[:200])
            return None

    def get(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint: str, data: Any = None) -> Any:
        return self.request("POST", endpoint, data=data)

    def put(self, endpoint: str, data: Any = None) -> Any:
        return self.request("PUT", endpoint, data=data)

    def delete(self, endpoint: str) -> Any:
        return self.request("DELETE", endpoint)

    # ------------------------------------------------------------------
    # Auth endpoints
    # ------------------------------------------------------------------
    def login(self, email: str, password: str) -> LoginResult:
        """Authenticate; does NOT store the token (the session owns that)."""
        response = self.post(ENDPOINTS["LOGIN"], {"email": email, "password": password})
        token = _first_present(response, _TOKEN_PATHS)
        user = _login_user(response)
        return LoginResult(
            raw=response,
            token=token if isinstance(token, str) else None,
            user=user,
        )

    def logout(self) -> Any:
        return self.post(ENDPOINTS["LOGOUT"])

    def auth_check(self) -> Dict[str, Any]:
        response = self.get(ENDPOINTS["AUTH_CHECK"])
        data = response.get("data") if isinstance(response, dict) else None
        if not isinstance(data, dict):
            data = response if isinstance(response, dict) else {}
        return data

    def change_password(self, current_password: str, new_password: str) -> Any:
        return self.post(
            ENDPOINTS["CHANGE_PASSWORD"],
            {
                "current_password": current_password,
                "new_password": new_password,
                "new_password_confirmation": new_password,
            },
        )

    def dashboard_counts(self, grade_id: Any = None) -> Any:
        """Headline totals for the home screen, optionally for one grade."""
        return self.get(ENDPOINTS["DASHBOARD_COUNT"], {"grade_id": grade_id})


def _raise_for_status_false(response: Any, fallback: str) -> None:
    """Some endpoints answer 200 with ``{"status": false, "msg": {...}}``."""
    if isinstance(response, dict) and response.get("status") is False:
        msg = response.get("msg")
        if isinstance(msg, dict) and msg:
            parts = []
            for value in msg.values():
                parts.extend(value if isinstance(value, list) else [value])
            message = ", ".join(str(p) for p in parts)
        elif isinstance(msg, str) and msg:
            message = msg
        else:
            message = response.get("message") or fallback
        raise TransportError(message, status=400, data=response)


class EntityResource:
    """CRUD requests for one entity definition."""

    def __init__(self, api: ApiClient, definition: EntityDefinition) -> None:
        self._api = api
        self.definition = definition

    def list(self, params: Mapping[str, Any] | None = None) -> Any:
        return self._api.get(self.definition.list_url(), params=params)

    def create(self, payload: Mapping[str, Any]) -> Any:
        response = self._api.post(self.definition.add_url(), dict(payload))
        _raise_for_status_false(response, f"Failed to add {self.definition.label.lower()}")
        return response

    def update(self, record_id: Any, payload: Mapping[str, Any]) -> Any:
        response = self._api.post(self.definition.update_url(record_id), dict(payload))
        _raise_for_status_false(response, f"Failed to update {self.definition.label.lower()}")
        return response

    def delete(self, record_id: Any) -> Any:
        response = self._api.request(self.definition.delete_method, self.definition.delete_url(record_id))
        _raise_for_status_false(response, f"Failed to delete {self.definition.label.lower()}")
        return response
