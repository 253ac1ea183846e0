"""Global configuration and constants for the school administration client."""

from __future__ import annotations

import os
from typing import Final, FrozenSet

API_BASE_URL: Final = os.environ.get("SCHOOLAPP_API_BASE_URL", "http://192.168.1.110:8001/api")
REQUEST_TIMEOUT_S: Final = 15  # seconds
DATA_DIR: Final = os.environ.get("SCHOOLAPP_DATA_DIR", "data")
LOG_LEVEL: Final = os.environ.get("SCHOOLAPP_LOG_LEVEL", "INFO")

TOAST_DURATION_MS: Final = 3000
# Some list endpoints lag behind deletes; wait this long before refetching.
DELETE_REFETCH_DELAY_MS: Final = 500

# Backend role ids: 0 Super Admin, 1 Admin, 2 Teacher, 3 Student
ROLE_LABELS: Final = {
    0: "Super Admin",
    1: "Admin",
    2: "Teacher",
    3: "Student",
}
ALLOWED_ROLES: Final[FrozenSet[int]] = frozenset({0, 1})

MIN_PASSWORD_LENGTH: Final = 6

NETWORK_ERROR_MESSAGE: Final = "Network error. Please check your connection."
UNKNOWN_ERROR_MESSAGE: Final = "An unknown error occurred."
INVALID_CREDENTIALS_MESSAGE: Final = "Invalid email or password."
