from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

_LEVEL_COLORS = {
    "low": "#00aa00",
    "moderate": "#d4a017",
    "high": "#cc0000",
}


class MainWindow(QMainWindow):
    startRequested = pyqtSignal()
    stopRequested = pyqtSignal()
    breakRequested = pyqtSignal()
    doNotDisturbChanged = pyqtSignal(bool)

    def __init__(self, pipeline_kind: str = "feature"):
        super().__init__()
        self.setWindowTitle("DeskEye")
        self._pipeline_kind = pipeline_kind
        self._build_ui()

    def _build_ui(self) -> None:
        central = QWidget()
        root = QVBoxLayout()

        grp = QGroupBox("Eye health")
        gl = QVBoxLayout()
        self.lbl_blink_rate = QLabel("Blink rate: -- /min")
        self.lbl_ear = QLabel("Mean EAR: --")
        self.lbl_strain = QLabel("Strain: --")
        self.lbl_level = QLabel("Level: --")
        self.lbl_last_break = QLabel("Last break: --")
        for lbl in (self.lbl_blink_rate, self.lbl_ear, self.lbl_strain, self.lbl_level, self.lbl_last_break):
            gl.addWidget(lbl)
        grp.setLayout(gl)
        root.addWidget(grp)

        self.chk_dnd = QCheckBox("Do not disturb")
        root.addWidget(self.chk_dnd)

        row = QHBoxLayout()
        self.btn_start = QPushButton("Start Monitoring")
        self.btn_stop = QPushButton("Stop Monitoring")
        self.btn_break = QPushButton("Take Break")
        self.btn_stop.setEnabled(False)
        self.btn_break.setEnabled(False)
        row.addWidget(self.btn_start)
        row.addWidget(self.btn_stop)
        row.addWidget(self.btn_break)
        root.addLayout(row)

        self.btn_start.clicked.connect(self.startRequested)
        self.btn_stop.clicked.connect(self.stopRequested)
        self.btn_break.clicked.connect(self.breakRequested)
        self.chk_dnd.toggled.connect(self.doNotDisturbChanged)

        central.setLayout(root)
        self.setCentralWidget(central)
        self.setStatusBar(QStatusBar())
        self.statusBar().showMessage(f"Pipeline: {self._pipeline_kind}")

    def toggle_controls(self, monitoring: bool) -> None:
        self.btn_start.setEnabled(not monitoring)
        self.btn_stop.setEnabled(monitoring)
        self.btn_break.setEnabled(monitoring)

    def set_do_not_disturb(self, on: bool) -> None:
        self.chk_dnd.blockSignals(True)
        self.chk_dnd.setChecked(bool(on))
        self.chk_dnd.blockSignals(False)

    def update_metrics(self, *, blink_rate: float, mean_ear: float, probability: float, level: str) -> None:
        self.lbl_blink_rate.setText(f"Blink rate: {blink_rate:.1f} /min")
        self.lbl_ear.setText(f"Mean EAR: {mean_ear:.3f}")
        self.lbl_strain.setText(f"Strain: {probability * 100:.0f}%")
        self.lbl_level.setText(f"Level: {level}")
        color = _LEVEL_COLORS.get(level, "#aaa")
        self.lbl_level.setStyleSheet(f"color: {color}; font-weight: 600;")

    def update_last_break(self, text: str) -> None:
        self.lbl_last_break.setText(f"Last break: {text}")

    def update_status(self, *, face_ok: bool, fps: Optional[float] = None) -> None:
        face = "OK" if face_ok else "--"
        fps_txt = f"{fps:.1f}" if fps is not None else "--"
        self.statusBar().showMessage(f"Pipeline: {self._pipeline_kind} | Face: {face} | FPS: {fps_txt}")
