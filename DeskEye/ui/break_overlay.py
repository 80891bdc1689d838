"""
BreakOverlay: always-on-top countdown shown while the user rests their eyes.

Emits breakFinished when the countdown reaches zero and breakSkipped when the
user presses Skip. Either way the overlay closes itself.
"""
from __future__ import annotations

from PyQt6.QtCore import Qt, QTimer, pyqtSignal
from PyQt6.QtWidgets import QLabel, QPushButton, QVBoxLayout, QWidget


class BreakOverlay(QWidget):
    breakFinished = pyqtSignal()
    breakSkipped = pyqtSignal()

    def __init__(self, duration_sec: int = 20):
        super().__init__()
        self.duration_sec = max(1, int(duration_sec))
        self._remaining = self.duration_sec
        self.setWindowFlags(
            Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool
            | Qt.WindowType.FramelessWindowHint
        )
        self._timer = QTimer(self)
        self._timer.setInterval(1000)
        self._timer.timeout.connect(self._on_second)
        self._build_ui()
        self.resize(360, 160)

    def _build_ui(self) -> None:
        lay = QVBoxLayout()
        lay.setContentsMargins(16, 16, 16, 16)
        lay.setSpacing(10)
        msg = QLabel("Look at something 20 feet away and blink slowly.")
        msg.setWordWrap(True)
        lay.addWidget(msg)
        self.lbl_countdown = QLabel(self._countdown_text())
        self.lbl_countdown.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.lbl_countdown.setStyleSheet("font-size: 28px; font-weight: bold;")
        lay.addWidget(self.lbl_countdown)
        btn = QPushButton("Skip")
        btn.clicked.connect(self._on_skip_clicked)
        lay.addWidget(btn)
        self.setLayout(lay)

    def _countdown_text(self) -> str:
        return f"{self._remaining} s"

    @property
    def remaining(self) -> int:
        return self._remaining

    def start(self) -> None:
        self._remaining = self.duration_sec
        self.lbl_countdown.setText(self._countdown_text())
        self.show()
        self._timer.start()

    def _on_second(self) -> None:
        self._remaining -= 1
        self.lbl_countdown.setText(self._countdown_text())
        if self._remaining <= 0:
            self._timer.stop()
            self.close()
            self.breakFinished.emit()

    def _on_skip_clicked(self) -> None:
        self._timer.stop()
        self.close()
        self.breakSkipped.emit()

    def cancel(self) -> None:
        """Close without emitting; the countdown is abandoned."""
        self._timer.stop()
        self.close()
