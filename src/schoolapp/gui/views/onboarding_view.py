"""First-run onboarding pages with Skip / Next / Get Started."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

__all__ = ["OnboardingSlide", "SLIDES", "OnboardingView"]


@dataclass(frozen=True)
class OnboardingSlide:
    title: str
    subtitle: str
    text: str
    features: Tuple[str, ...]


SLIDES: Tuple[OnboardingSlide, ...] = (
    OnboardingSlide(
        "Welcome to SchoolApp",
        "Simplify School Management",
        "Manage classes, attendance, and communicate with parents all in one place.",
        ("Classes", "Attendance", "Communication"),
    ),
    OnboardingSlide(
        "Track Progress",
        "Monitor Student Performance",
        "Real-time insights into student performance and automated report generation.",
        ("Analytics", "Reports", "Insights"),
    ),
    OnboardingSlide(
        "Stay Connected",
        "Seamless Communication",
        "Send announcements, chat with parents and staff, and stay updated.",
        ("Messaging", "Announcements", "Notifications"),
    ),
    OnboardingSlide(
        "All Set!",
        "Ready to Begin",
        "You're all set to manage your school efficiently. Let's get started!",
        ("Ready", "Excited", "Go"),
    ),
)


class OnboardingView(QWidget):
    def __init__(self, on_done: Callable[[], None], parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._on_done = on_done
        self.index = 0
        self._build_ui()
        self._render()

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        top = QHBoxLayout()
        top.addStretch(1)
        self.skip_button = QPushButton("Skip")
        self.skip_button.clicked.connect(self._finish)  # type: ignore
        top.addWidget(self.skip_button)
        root.addLayout(top)

        root.addStretch(1)
        self.title_label = QLabel()
        self.title_label.setObjectName("viewTitleLabel")
        self.subtitle_label = QLabel()
        self.text_label = QLabel()
        self.text_label.setWordWrap(True)
        self.features_label = QLabel()
        for w in (self.title_label, self.subtitle_label, self.text_label, self.features_label):
            w.setAlignment(Qt.AlignmentFlag.AlignCenter)
            root.addWidget(w)
        root.addStretch(1)

        nav = QHBoxLayout()
        self.back_button = QPushButton("← Back")
        self.back_button.clicked.connect(self.previous)  # type: ignore
        self.page_label = QLabel()
        self.next_button = QPushButton()
        self.next_button.clicked.connect(self.next)  # type: ignore
        nav.addWidget(self.back_button)
        nav.addStretch(1)
        nav.addWidget(self.page_label)
        nav.addStretch(1)
        nav.addWidget(self.next_button)
        root.addLayout(nav)

    def _render(self) -> None:
        slide = SLIDES[self.index]
        self.title_label.setText(slide.title)
        self.subtitle_label.setText(slide.subtitle)
        self.text_label.setText(slide.text)
        self.features_label.setText(" · ".join(slide.features))
        self.page_label.setText(f"{self.index + 1} / {len(SLIDES)}")
        self.back_button.setEnabled(self.index > 0)
        last = self.index == len(SLIDES) - 1
        self.next_button.setText("Get Started" if last else "Next →")
        self.skip_button.setVisible(not last)

    def next(self) -> None:
        if self.index >= len(SLIDES) - 1:
            self._finish()
            return
        self.index += 1
        self._render()

    def previous(self) -> None:
        if self.index > 0:
            self.index -= 1
            self._render()

    def _finish(self) -> None:
        self._on_done()
