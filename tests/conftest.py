# Minimal conftest providing a fallback 'qtbot' fixture if pytest-qt is not installed.
# Widget tests still run their lifecycle against an offscreen QApplication.
# If pytest-qt is installed, its fixture wins.

import contextlib
import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:  # If pytest-qt present, do nothing (its fixture will be used)
    import pytestqt  # type: ignore  # noqa: F401
except ImportError:  # pragma: no cover
    try:
        from PyQt6.QtWidgets import QApplication
    except ImportError:  # pragma: no cover
        QApplication = None  # type: ignore

    @pytest.fixture
    def qtbot():  # type: ignore
        if QApplication is None:
            pytest.skip("PyQt6 not available")
        QApplication.instance() or QApplication(sys.argv)  # type: ignore
        widgets = []

        class Bot:
            def addWidget(self, w):  # mimic pytest-qt API subset
                widgets.append(w)

            @contextlib.contextmanager
            def waitSignal(self, *args, **kwargs):  # no-op stub
                yield

        yield Bot()
        for w in widgets:
            w.close()


from fakes import FakeApi, FakeResource, FakeScheduler  # noqa: E402

from schoolapp.core.storage import MemoryBackend, PersistentStore  # noqa: E402
from schoolapp.gui.services.event_bus import EventBus  # noqa: E402
from schoolapp.gui.services.notification_bus import NotificationBus  # noqa: E402


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def notifications(scheduler):
    return NotificationBus(scheduler)


@pytest.fixture
def shown(notifications):
    """Messages delivered to a recording surface mounted on ``notifications``."""
    received = []

    def surface(message):
        if message is not None:
            received.append(message)

    notifications.subscribe(surface)
    return received


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    return PersistentStore(backend)


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def resource():
    return FakeResource()
