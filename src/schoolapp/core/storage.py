"""Persistent key/value store for session state.

Holds the auth token, the cached user profile, the onboarding flag and the
remembered login email. Values live in a single JSON document written
atomically next to the application data.

Design principles:
- Pure logic (no Qt import) so it can be unit-tested headless.
- Explicit schema with version field; incompatible files read as empty.
- Best-effort: every backend failure becomes a logged ``StorageError`` and
  the operation degrades to "value absent" instead of raising.
- No transactionality across keys; callers issue sequential writes.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from schoolapp.core.errors import StorageError

__all__ = [
    "StorageKey",
    "StorageBackend",
    "MemoryBackend",
    "JsonFileBackend",
    "PersistentStore",
    "STORE_VERSION",
]

_log = logging.getLogger(__name__)

STORE_VERSION = 1  # Increment when structure changes

DEFAULT_FILENAME = "client_state.json"

TRUE_SENTINEL = "true"


class StorageKey(str, Enum):
    AUTH_TOKEN = "@schoolapp_auth_token"
    USER_DATA = "@schoolapp_user_data"
    ONBOARDING_COMPLETED = "@schoolapp_onboarding_completed"
    REMEMBER_ME = "@schoolapp_remember_me"


class StorageBackend(Protocol):
    def read(self) -> Dict[str, str]: ...  # pragma: no cover - structural

    def write(self, values: Dict[str, str]) -> None: ...  # pragma: no cover - structural


class MemoryBackend:
    """Process-local backend used by tests and headless runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})

    def read(self) -> Dict[str, str]:
        return dict(self.values)

    def write(self, values: Dict[str, str]) -> None:
        self.values = dict(values)


class JsonFileBackend:
    """Stores all keys in one versioned JSON file.

    Layout::

        {"version": 1, "values": {"@schoolapp_auth_token": "...", ...}}
    """

    def __init__(self, base_dir: str | Path | None = None, filename: str = DEFAULT_FILENAME):
        base = Path(base_dir) if base_dir else Path.cwd()
        self._path = base / filename

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError(f"Unreadable state file {self._path}: {exc}") from exc
        if not isinstance(data, dict) or int(data.get("version", -1)) != STORE_VERSION:
            # Unknown layout: start over rather than guess.
            return {}
        values = data.get("values")
        if not isinstance(values, dict):
            return {}
        return {str(k): v for k, v in values.items() if isinstance(v, str)}

    def write(self, values: Dict[str, str]) -> None:
        payload = {"version": STORE_VERSION, "values": values}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as exc:
            raise StorageError(f"Cannot write state file {self._path}: {exc}") from exc


class PersistentStore:
    """Best-effort get/set/remove over a fixed set of logical keys.

    Failures are logged and reported as absence; ``last_error`` keeps the
    most recent one for diagnostics.
    """

    def __init__(self, backend: StorageBackend | None = None) -> None:
        self._backend: StorageBackend = backend if backend is not None else MemoryBackend()
        self.last_error: StorageError | None = None

    @classmethod
    def in_directory(cls, base_dir: str | Path | None) -> "PersistentStore":
        return cls(JsonFileBackend(base_dir))

    # ------------------------------------------------------------------
    # Core contract
    # ------------------------------------------------------------------
    def get(self, key: StorageKey) -> Optional[str]:
        name = StorageKey(key).value
        try:
            return self._backend.read().get(name)
        except Exception as exc:  # noqa: BLE001 - storage never propagates
            self._report("read", name, exc)
            return None

    def set(self, key: StorageKey, value: str) -> None:
        name = StorageKey(key).value
        try:
            values = self._backend.read()
            values[name] = str(value)
            self._backend.write(values)
        except Exception as exc:  # noqa: BLE001
            self._report("write", name, exc)

    def remove(self, key: StorageKey) -> None:
        name = StorageKey(key).value
        try:
            values = self._backend.read()
            if name in values:
                del values[name]
                self._backend.write(values)
        except Exception as exc:  # noqa: BLE001
            self._report("remove", name, exc)

    # ------------------------------------------------------------------
    # Typed helpers
    # ------------------------------------------------------------------
    def get_json(self, key: StorageKey) -> Any:
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            self._report("decode", StorageKey(key).value, exc)
            return None

    def set_json(self, key: StorageKey, value: Any) -> None:
        try:
            text = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            self._report("encode", StorageKey(key).value, exc)
            return
        self.set(key, text)

    def get_flag(self, key: StorageKey) -> bool:
        return self.get(key) == TRUE_SENTINEL

    def set_flag(self, key: StorageKey) -> None:
        self.set(key, TRUE_SENTINEL)

    def clear_session_data(self) -> None:
        """Remove token, user profile and remembered email (independently)."""
        for key in (StorageKey.AUTH_TOKEN, StorageKey.USER_DATA, StorageKey.REMEMBER_ME):
            self.remove(key)

    # ------------------------------------------------------------------
    def _report(self, operation: str, key: str, exc: BaseException) -> None:
        err = exc if isinstance(exc, StorageError) else StorageError(str(exc))
        self.last_error = err
        _log.warning("storage %s failed for %s: %s", operation, key, err)
