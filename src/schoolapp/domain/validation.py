"""Local, synchronous form validation.

Every check raises ``ValidationError`` carrying the offending field so the
caller can publish a single Error toast before any network call.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping

from schoolapp.config import settings
from schoolapp.core.errors import ValidationError

__all__ = [
    "is_blank",
    "require_fields",
    "check_date8",
    "check_number",
    "check_email",
    "check_password",
    "split_date8",
]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_DATE8_RE = re.compile(r"^\d{8}$")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def require_fields(form: Mapping[str, Any], fields: Iterable[str], labels: Mapping[str, str] | None = None) -> None:
    labels = labels or {}
    missing = [name for name in fields if is_blank(form.get(name))]
    if missing:
        names = ", ".join(labels.get(name, name) for name in missing)
        raise ValidationError(f"Please fill {names}", field=missing[0])


def check_date8(value: Any, field: str = "date", label: str | None = None) -> str:
    """Dates travel as ``YYYYMMDD`` strings; return the stripped value."""
    text = str(value).strip() if value is not None else ""
    if not _DATE8_RE.match(text):
        raise ValidationError(f"{label or field} must be in YYYYMMDD format", field=field)
    return text


def check_number(value: Any, field: str, label: str | None = None) -> float:
    """Parse a finite number; NaN and infinities cannot travel as JSON."""
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number):
        raise ValidationError(f"{label or field} must be a number", field=field)
    return number


def check_email(email: str) -> str:
    text = (email or "").strip()
    if not text:
        raise ValidationError("Email is required", field="email")
    if not _EMAIL_RE.match(text):
        raise ValidationError("Please enter a valid email", field="email")
    return text


def check_password(password: str, field: str = "password", label: str = "Password") -> str:
    if is_blank(password):
        raise ValidationError(f"{label} is required", field=field)
    if len(password) < settings.MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"{label} must be at least {settings.MIN_PASSWORD_LENGTH} characters", field=field
        )
    return password


def split_date8(text: str) -> tuple[str, str, str]:
    """``"20250131"`` -> ``("2025", "01", "31")``; blanks for malformed input."""
    if not text or len(text) != 8:
        return "", "", ""
    return text[0:4], text[4:6], text[6:8]
