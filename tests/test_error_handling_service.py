import sys

from schoolapp.core.errors import TransportError
from schoolapp.domain.models import ToastKind
from schoolapp.gui.services.error_handling_service import GENERIC_ERROR_TEXT, ErrorHandlingService
from schoolapp.gui.services.event_bus import AppEvent, EventBus


def _raised(exc):
    try:
        raise exc
    except Exception as e:  # noqa: BLE001
        return e


def test_history_is_bounded():
    svc = ErrorHandlingService(history=2)
    for exc in (ValueError("boom1"), RuntimeError("boom2"), KeyError("boom3")):
        svc.report(_raised(exc))
    kinds = [r.kind for r in svc.recent()]
    assert kinds == ["RuntimeError", "KeyError"]


def test_uncaught_exception_surfaces_generic_toast(notifications, shown):
    bus = EventBus()
    payloads = []
    bus.subscribe(AppEvent.UNCAUGHT_EXCEPTION, lambda e: payloads.append(e.payload))
    svc = ErrorHandlingService(event_bus=bus, notifications=notifications)
    record = svc.report(_raised(ZeroDivisionError("division by zero")))
    assert "ZeroDivisionError" in record.details
    assert payloads[0]["type"] == "ZeroDivisionError"
    assert [(m.kind, m.text) for m in shown] == [(ToastKind.ERROR, GENERIC_ERROR_TEXT)]


def test_escaped_client_error_keeps_its_message(notifications, shown):
    svc = ErrorHandlingService(notifications=notifications)
    svc.report(_raised(TransportError("Network error. Please check your connection.", status=0)))
    assert shown[-1].text == "Network error. Please check your connection."


def test_install_uninstall_restores_hook():
    original = sys.excepthook
    svc = ErrorHandlingService()
    svc.install()
    assert svc.installed
    assert sys.excepthook is not original
    svc.uninstall()
    assert sys.excepthook is original
    assert not svc.installed
