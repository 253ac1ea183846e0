"""Toast presentation surface.

``ToastHost`` is the single rendering surface for the ``NotificationBus``. It
subscribes when constructed and releases its subscription when closed or
destroyed. The bus owns the dismiss timer; the host only shows the message it
is handed and hides itself on ``None``.

Usage:
    host = ToastHost(bus, parent_window)
    bus.publish("Saved", ToastKind.SUCCESS)
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QWidget

from schoolapp.domain.models import ToastKind, ToastMessage
from schoolapp.gui.services.notification_bus import NotificationBus, ToastSubscription

__all__ = ["ToastHost", "TOAST_STYLES"]

# kind -> (background, foreground)
TOAST_STYLES = {
    ToastKind.INFO: ("#2F3640", "#FFFFFF"),
    ToastKind.SUCCESS: ("#2E7D32", "#FFFFFF"),
    ToastKind.ERROR: ("#C62828", "#FFFFFF"),
}


class ToastHost(QWidget):
    def __init__(self, bus: NotificationBus, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setObjectName("toastHost")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self._bus = bus
        self._message: Optional[ToastMessage] = None
        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 8, 8, 8)
        self.label = QLabel("")
        self.label.setObjectName("toastText")
        self.label.setWordWrap(True)
        layout.addWidget(self.label, 1)
        self.close_button = QPushButton("×")
        self.close_button.setObjectName("toastClose")
        self.close_button.setFlat(True)
        self.close_button.clicked.connect(self._bus.dismiss)  # type: ignore
        layout.addWidget(self.close_button)
        self.hide()
        sub = bus.subscribe(self._on_toast)
        self._subscription: Optional[ToastSubscription] = sub
        # Bound methods are unusable once the C++ side is gone; capture the handle.
        self.destroyed.connect(lambda *_: sub.cancel())  # type: ignore

    # Bus callback ----------------------------------------------------
    def _on_toast(self, message: Optional[ToastMessage]) -> None:
        self._message = message
        if message is None:
            self.hide()
            return
        bg, fg = TOAST_STYLES.get(message.kind, TOAST_STYLES[ToastKind.INFO])
        self.setStyleSheet(
            f"#toastHost {{ background: {bg}; border-radius: 6px; }}"
            f" #toastText, #toastClose {{ color: {fg}; }}"
        )
        self.setProperty("kind", message.kind.value)
        self.label.setText(message.text)
        self.show()
        self.raise_()

    # Introspection ---------------------------------------------------
    @property
    def message(self) -> Optional[ToastMessage]:
        return self._message

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    # Lifecycle -------------------------------------------------------
    def _release(self, *_args) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def closeEvent(self, event):  # type: ignore[override]
        self._release()
        super().closeEvent(event)
