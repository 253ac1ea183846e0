"""Qt-free domain layer (models, normalization, entities, validation)."""

from .models import AppPhase, Credentials, Session, ToastKind, ToastMessage, UserProfile  # noqa: F401
from .normalizer import DATA, DATA_DATA, TOP_LEVEL, coerce_flag, data_key, normalize  # noqa: F401

__all__ = [
    "AppPhase",
    "Credentials",
    "Session",
    "ToastKind",
    "ToastMessage",
    "UserProfile",
    "DATA",
    "DATA_DATA",
    "TOP_LEVEL",
    "coerce_flag",
    "data_key",
    "normalize",
]
