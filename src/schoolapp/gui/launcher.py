"""Launcher for `python -m schoolapp.gui` and the ``schoolapp`` script.

Configures logging, guards the data directory against a second instance,
bootstraps the application context and shows the root window.
"""

from __future__ import annotations

import logging
import sys

from schoolapp.config import settings
from schoolapp.gui.app.bootstrap import configure_logging, create_app, parse_data_dir
from schoolapp.gui.app.single_instance import single_instance

_log = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:  # pragma: no cover - runtime
    args = argv if argv is not None else sys.argv[1:]
    configure_logging()
    data_dir = parse_data_dir(args) or settings.DATA_DIR
    with single_instance(data_dir) as acquired:
        if not acquired:
            _log.error("Another SchoolApp instance is already using %s", data_dir)
            return 1
        ctx = create_app(headless=False, data_dir=data_dir)
        if ctx.qt_app is None:
            _log.error("PyQt6 is not available; cannot start the GUI")
            return 1
        from schoolapp.gui.main_window import RootWindow

        win = RootWindow(ctx)
        win.show()
        try:
            return ctx.qt_app.exec()
        finally:
            ctx.shutdown()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
