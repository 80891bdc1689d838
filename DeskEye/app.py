"""
DeskEye entry point.

    python -m DeskEye                  desktop UI
    python -m DeskEye --mode headless  camera -> log, no windows
"""
from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

from DeskEye.core.errors import DeskEyeError, ModelError
from DeskEye.core.session import MonitoringSession
from DeskEye.core.recorder import MetricRecorder
from DeskEye.core.settings import DEFAULT_BASE_DIR, PIPELINE_KINDS, PipelineConfig, SettingsManager
from DeskEye.tracking.events import StrainScore
from DeskEye.tracking.pipeline import FrameResult
from DeskEye.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="deskeye", description="Webcam eye-strain monitor")
    p.add_argument("--mode", choices=("ui", "headless"), default="ui")
    p.add_argument("--pipeline", choices=PIPELINE_KINDS, default=None, help="override the configured pipeline")
    p.add_argument("--camera", type=int, default=None, help="camera index")
    p.add_argument("--framerate", type=int, default=None, help="frames processed per second")
    p.add_argument("--duration", type=float, default=None, help="headless: stop after N seconds")
    p.add_argument("--settings", default=None, help="settings JSON path")
    p.add_argument("--data-dir", default=None, help="metric store directory")
    p.add_argument("--model", default=None, help="pickled strain model for the model pipeline")
    p.add_argument("--log-level", default=None)
    return p.parse_args(argv)


def apply_overrides(settings: SettingsManager, args: argparse.Namespace) -> None:
    values = {}
    if args.pipeline:
        values["pipeline"] = args.pipeline
    if args.camera is not None:
        values["camera_index"] = args.camera
    if args.framerate is not None:
        values["framerate"] = args.framerate
    if args.model:
        values["model_path"] = args.model
    if args.log_level:
        values["logging"] = {"level": args.log_level}
    if values:
        settings.update(values)


def load_model(config: PipelineConfig, path: Optional[str]):
    """Strain model for the model pipeline; None means timer-band fallback."""
    if config.pipeline != "model":
        return None
    if not path:
        logger.warning("No strain model configured, using blink-timer fallback")
        return None
    from DeskEye.ai.strain_model import FrameStrainModel

    try:
        return FrameStrainModel.load(path)
    except ModelError as e:
        logger.warning("%s; using blink-timer fallback", e)
        return None


def build_session(settings: SettingsManager, config: PipelineConfig, store=None, landmarker=None) -> MonitoringSession:
    model = load_model(config, settings.model_path())
    sink = store.save_metric if store is not None else None
    recorder = MetricRecorder(sink=sink, interval_ms=config.metric_interval_ms)
    return MonitoringSession(config, landmarker=landmarker, recorder=recorder, model=model)


def run_headless(settings: SettingsManager, config: PipelineConfig, store, duration_s: Optional[float]) -> int:
    from DeskEye.camera import Camera
    from DeskEye.tracking.face_mesh import FaceMeshLandmarker
    from DeskEye.tracking.scheduler import TickLoop, monotonic_ms

    camera = Camera(index=settings.camera_index(), target_fps=config.framerate)
    if not camera.start():
        return 1
    landmarker = FaceMeshLandmarker(keep_image=config.pipeline == "model")
    session = build_session(settings, config, store=store, landmarker=landmarker)

    def _on_score(res: FrameResult) -> None:
        if res.blink is not None:
            logger.info(
                "Blink (%d ms) | rate %.1f/min | EAR %.3f | strain %.2f (%s)",
                res.blink.duration, res.score.blink_rate, res.score.mean_ear,
                res.score.probability, res.level,
            )

    def _on_break(score: StrainScore) -> None:
        # No overlay without a UI: suggest the break and restart the cooldown
        logger.warning("Time for a break: strain %.0f%%", score.probability * 100)
        session.skip_break(score.timestamp)

    session.on_score(_on_score)
    session.on_break_requested(_on_break)

    def _tick(now_ms: int) -> None:
        ok, frame = camera.read()
        session.tick(frame if ok else None, now_ms)

    loop = TickLoop(_tick, config.framerate)
    session.start(monotonic_ms())
    session_id = None
    if store is not None:
        try:
            session_id = store.start_session()
        except DeskEyeError:
            logger.exception("Could not record session start")
    try:
        loop.run(duration_s=duration_s)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        total = session.total_blinks
        session.stop()
        camera.stop()
        landmarker.close()
        if store is not None and session_id is not None:
            try:
                store.end_session(session_id, total_blinks=total)
            except DeskEyeError:
                logger.exception("Could not record session end")
    return 0


def run_ui_mode(settings: SettingsManager, config: PipelineConfig, store) -> int:
    from DeskEye.camera import Camera
    from DeskEye.core.app import AppCore, run_ui
    from DeskEye.tracking.face_mesh import FaceMeshLandmarker

    def _factory() -> AppCore:
        landmarker = FaceMeshLandmarker(keep_image=config.pipeline == "model")
        session = build_session(settings, config, store=store, landmarker=landmarker)
        camera = Camera(index=settings.camera_index(), target_fps=config.framerate)
        return AppCore(settings, session, store, camera)

    return run_ui(_factory)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = SettingsManager(args.settings)
        apply_overrides(settings, args)
        setup_logging(settings.log_level(), settings.log_file())
        config = settings.pipeline_config()
        settings.camera_index()
        retention_days = settings.data_retention_days()
    except (DeskEyeError, TypeError, ValueError) as e:
        logging.getLogger("DeskEye").error("Invalid configuration: %s", e)
        return 2

    from DeskEye.storage.metrics_store import MetricsStore

    data_dir = args.data_dir or os.path.join(DEFAULT_BASE_DIR, "data")
    try:
        store = MetricsStore(data_dir)
        store.delete_old_metrics(retention_days)
    except DeskEyeError as e:
        logger.error("Metric store unavailable, metrics will not be saved: %s", e)
        store = None

    if args.mode == "headless":
        return run_headless(settings, config, store, args.duration)
    return run_ui_mode(settings, config, store)


if __name__ == "__main__":
    raise SystemExit(main())
