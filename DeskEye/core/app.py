from __future__ import annotations

import logging
import sys
import time
from typing import Optional

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import QApplication, QMessageBox

from DeskEye.camera import Camera
from DeskEye.core.errors import DeskEyeError
from DeskEye.core.session import MonitoringSession
from DeskEye.core.settings import SettingsManager
from DeskEye.storage.metrics_store import MetricsStore
from DeskEye.tracking.events import StrainScore
from DeskEye.tracking.pipeline import FrameResult
from DeskEye.tracking.scheduler import FPSMonitor, monotonic_ms
from DeskEye.ui.break_overlay import BreakOverlay
from DeskEye.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


class AppCore:
    """Qt front-end: a QTimer drives camera -> session at the configured rate."""

    def __init__(
        self,
        settings: SettingsManager,
        session: MonitoringSession,
        store: Optional[MetricsStore],
        camera: Camera,
    ) -> None:
        self.settings = settings
        self.session = session
        self.store = store
        self.camera = camera
        self._session_id: Optional[int] = None
        self._overlay: Optional[BreakOverlay] = None
        self.fps = FPSMonitor(window=max(10, session.config.framerate * 3))

        self.timer = QTimer()
        self.timer.setInterval(session.config.frame_interval_ms)
        self.timer.timeout.connect(self._on_tick)

        self.win = MainWindow(pipeline_kind=session.pipeline.kind)
        self.win.set_do_not_disturb(session.do_not_disturb)
        self.win.startRequested.connect(self.start_monitoring)
        self.win.stopRequested.connect(self.stop_monitoring)
        self.win.breakRequested.connect(self.show_break)
        self.win.doNotDisturbChanged.connect(self._on_dnd_changed)

        self.session.on_score(self._on_score)
        self.session.on_break_requested(self._on_break_requested)

    # Monitoring --------------------------------------------------------
    def start_monitoring(self) -> None:
        if self.session.active:
            return
        if not self.camera.is_open and not self.camera.start():
            QMessageBox.warning(self.win, "Camera", f"Failed to open camera {self.camera.index}.")
            self.win.toggle_controls(monitoring=False)
            return
        self.session.start(monotonic_ms())
        if self.store is not None:
            try:
                self._session_id = self.store.start_session()
            except DeskEyeError:
                logger.exception("Could not record session start")
                self._session_id = None
        self.fps.reset()
        self.timer.start()
        self.win.toggle_controls(monitoring=True)
        self.win.update_last_break("session start")

    def stop_monitoring(self) -> None:
        self.timer.stop()
        if self._overlay is not None:
            self._overlay.cancel()
            self._overlay = None
        total = self.session.total_blinks
        self.session.stop()
        self.camera.stop()
        if self.store is not None and self._session_id is not None:
            try:
                self.store.end_session(self._session_id, total_blinks=total)
            except DeskEyeError:
                logger.exception("Could not record session end")
            self._session_id = None
        self.win.toggle_controls(monitoring=False)

    def _on_tick(self) -> None:
        now = monotonic_ms()
        self.fps.tick(now / 1000.0)
        ok, frame = self.camera.read()
        if not ok:
            frame = None
        res = self.session.tick(frame, now)
        self.win.update_status(face_ok=bool(res and res.face_detected), fps=self.fps.fps())

    def _on_score(self, res: FrameResult) -> None:
        self.win.update_metrics(
            blink_rate=res.score.blink_rate,
            mean_ear=res.score.mean_ear,
            probability=res.score.probability,
            level=res.level,
        )

    def _on_dnd_changed(self, on: bool) -> None:
        self.session.do_not_disturb = bool(on)
        self.settings.set_do_not_disturb(on)
        self.settings.save()

    # Breaks ------------------------------------------------------------
    def _on_break_requested(self, score: StrainScore) -> None:
        # The session already marked the break as in progress
        self._open_overlay()

    def show_break(self) -> None:
        if self._overlay is not None or not self.session.begin_break():
            return
        self._open_overlay()

    def _open_overlay(self) -> None:
        if self._overlay is not None:
            return
        overlay = BreakOverlay(duration_sec=self.settings.break_duration_sec())
        overlay.breakFinished.connect(lambda: self._on_break_finished(overlay))
        overlay.breakSkipped.connect(lambda: self._on_break_skipped(overlay))
        self._overlay = overlay
        overlay.start()

    def _on_break_finished(self, overlay: BreakOverlay) -> None:
        # Signals from a cancelled overlay belong to no break
        if overlay is not self._overlay:
            return
        self._overlay = None
        self.session.complete_break(monotonic_ms())
        self.win.update_last_break(time.strftime("%H:%M:%S"))

    def _on_break_skipped(self, overlay: BreakOverlay) -> None:
        if overlay is not self._overlay:
            return
        self._overlay = None
        self.session.skip_break(monotonic_ms())


def run_ui(core_factory) -> int:
    """Create the QApplication, then the AppCore (widgets need the app first)."""
    app = QApplication(sys.argv)
    core = core_factory()
    core.win.show()
    code = app.exec()
    if core.session.active:
        core.stop_monitoring()
    core.camera.stop()
    if core.session.landmarker is not None:
        core.session.landmarker.close()
    return int(code)
