"""Application layer: bootstrap, context object and process-level helpers."""

from .bootstrap import AppContext, configure_logging, create_app, parse_data_dir  # noqa: F401
from .single_instance import InstanceLock, single_instance  # noqa: F401
from .timing import StartupPhase, TimingLogger  # noqa: F401

__all__ = [
    "AppContext",
    "configure_logging",
    "create_app",
    "parse_data_dir",
    "InstanceLock",
    "single_instance",
    "StartupPhase",
    "TimingLogger",
]
