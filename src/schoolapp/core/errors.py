"""Structured client errors shared by storage, transport and view models."""

from __future__ import annotations

from typing import Any

from schoolapp.config import settings

__all__ = [
    "ClientError",
    "StorageError",
    "TransportError",
    "ValidationError",
    "AuthError",
    "InvalidTransitionError",
    "best_message",
]


class ClientError(Exception):
    """Base class for errors raised inside the client runtime."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class StorageError(ClientError):
    """Reading or writing persisted state failed.

    Always recovered locally by the store: logged and treated as absent.
    """


class TransportError(ClientError):
    """A backend call failed or returned a non-success status.

    ``status`` is the HTTP status code (0 for connection failures) and
    ``data`` the parsed body or raw text when one was received.
    """

    def __init__(self, message: str, *, status: int = 0, data: Any = None):
        super().__init__(message, context={"status": status})
        self.status = status
        self.data = data

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"TransportError(status={self.status}, message={self.message!r})"


class ValidationError(ClientError):
    """A local form-field check failed before any network call."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message, context={"field": field})
        self.field = field


class AuthError(ClientError):
    """Login reached the backend but produced no usable authorized session."""


class InvalidTransitionError(RuntimeError):
    """Raised for an AppPhase transition outside the allowed table."""


def best_message(exc: BaseException, default: str = settings.UNKNOWN_ERROR_MESSAGE) -> str:
    """Return the most useful human-readable text for ``exc``.

    Transport errors prefer backend body fields (``message`` then ``error``),
    then the error's own text; anything else falls back to ``str(exc)``.
    """
    if isinstance(exc, TransportError):
        data = exc.data
        if isinstance(data, dict):
            for key in ("message", "error"):
                value = data.get(key)
                if isinstance(value, str) and value.strip():
                    return value
        if exc.message:
            return exc.message
        return default
    if isinstance(exc, ClientError) and exc.message:
        return exc.message
    text = str(exc)
    return text or default
