import logging

from schoolapp.domain.models import ToastKind
from schoolapp.gui.services.notification_bus import NotificationBus


def _surface():
    events = []
    return events, events.append


def test_publish_without_subscriber_does_not_raise(scheduler, caplog):
    bus = NotificationBus(scheduler)
    with caplog.at_level(logging.WARNING):
        msg = bus.publish("hello")
    assert msg.text == "hello"
    assert bus.current is None
    assert scheduler.pending == []
    assert "toast dropped" in caplog.text


def test_message_auto_dismisses_after_duration(scheduler):
    bus = NotificationBus(scheduler)
    events, handler = _surface()
    bus.subscribe(handler)
    msg = bus.publish("Saved", ToastKind.SUCCESS)
    assert events == [msg]
    assert msg.duration_ms == 3000
    scheduler.advance(2999)
    assert bus.current is msg
    scheduler.advance(1)
    assert bus.current is None
    assert events == [msg, None]


def test_second_publish_cancels_first_timer(scheduler):
    bus = NotificationBus(scheduler)
    events, handler = _surface()
    bus.subscribe(handler)
    first = bus.publish("one")
    scheduler.advance(2000)
    second = bus.publish("two", ToastKind.ERROR)
    assert len(scheduler.pending) == 1
    # first timer's deadline passes without hiding the second message
    scheduler.advance(1500)
    assert bus.current is second
    scheduler.advance(1500)
    assert bus.current is None
    assert events == [first, second, None]


def test_last_subscriber_wins(scheduler):
    bus = NotificationBus(scheduler)
    old_events, old_handler = _surface()
    new_events, new_handler = _surface()
    old_sub = bus.subscribe(old_handler)
    bus.subscribe(new_handler)
    bus.publish("x")
    assert old_events == []
    assert [m.text for m in new_events] == ["x"]
    # cancelling the stale subscription keeps the newer one
    old_sub.cancel()
    assert bus.has_subscriber
    bus.publish("y")
    assert [m.text for m in new_events if m] == ["x", "y"]


def test_unsubscribe_cancels_pending_dismiss(scheduler):
    bus = NotificationBus(scheduler)
    events, handler = _surface()
    sub = bus.subscribe(handler)
    bus.publish("x")
    sub.cancel()
    assert not bus.has_subscriber
    assert scheduler.pending == []
    assert bus.current is None


def test_manual_dismiss(scheduler):
    bus = NotificationBus(scheduler)
    events, handler = _surface()
    bus.subscribe(handler)
    msg = bus.publish("x")
    bus.dismiss()
    assert events == [msg, None]
    assert scheduler.pending == []
    bus.dismiss()  # nothing visible: no extra delivery
    assert events == [msg, None]


def test_handler_error_is_isolated(scheduler):
    bus = NotificationBus(scheduler)

    def broken(_message):
        raise RuntimeError("render failed")

    bus.subscribe(broken)
    msg = bus.publish("x")
    assert msg.text == "x"
    assert len(bus.errors) == 1


def test_kind_helpers(notifications, shown):
    notifications.success("ok")
    notifications.error("bad")
    notifications.info("fyi")
    assert [m.kind for m in shown] == [ToastKind.SUCCESS, ToastKind.ERROR, ToastKind.INFO]
