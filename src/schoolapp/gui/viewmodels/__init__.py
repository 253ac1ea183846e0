"""Qt-free view models backing the screens."""

from .crud_viewmodel import CrudState, CrudViewModel  # noqa: F401
from .dashboard_viewmodel import DashboardCounts, DashboardViewModel  # noqa: F401
from .login_viewmodel import LoginState, LoginViewModel  # noqa: F401
from .profile_viewmodel import ProfileViewModel  # noqa: F401

__all__ = [
    "CrudState",
    "CrudViewModel",
    "DashboardCounts",
    "DashboardViewModel",
    "LoginState",
    "LoginViewModel",
    "ProfileViewModel",
]
