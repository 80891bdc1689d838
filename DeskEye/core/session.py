"""
MonitoringSession: the one place where per-session mutable state lives.

A session owns a pipeline (detector state + window logs), the metric
recorder and the break bookkeeping. start() resets all of it before the first
frame; stop() drops any half-finished eye closure and leaves nothing pending.
All calls happen on the tick thread, in frame order.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from DeskEye.core.recorder import MetricRecord, MetricRecorder
from DeskEye.core.settings import PipelineConfig
from DeskEye.tracking.events import StrainScore
from DeskEye.tracking.landmarks import FrameObservation
from DeskEye.tracking.pipeline import FrameResult, StrainPipeline, build_pipeline

logger = logging.getLogger(__name__)

ScoreListener = Callable[[FrameResult], None]
BreakListener = Callable[[StrainScore], None]


class MonitoringSession:
    def __init__(
        self,
        config: PipelineConfig,
        *,
        pipeline: Optional[StrainPipeline] = None,
        landmarker=None,
        recorder: Optional[MetricRecorder] = None,
        model=None,
    ) -> None:
        self.config = config
        self.pipeline = pipeline or build_pipeline(config, model=model)
        self.landmarker = landmarker
        self.recorder = recorder or MetricRecorder(interval_ms=config.metric_interval_ms)
        self.do_not_disturb = bool(config.do_not_disturb)
        self.active = False
        self.started_ms: Optional[int] = None
        self.last_break_ms: Optional[int] = None
        self.break_in_progress = False
        self.last_result: Optional[FrameResult] = None
        self.frames = 0
        self.dropped_frames = 0
        self._score_listeners: List[ScoreListener] = []
        self._break_listeners: List[BreakListener] = []

    # Listeners ---------------------------------------------------------
    def on_score(self, cb: ScoreListener) -> None:
        self._score_listeners.append(cb)

    def on_break_requested(self, cb: BreakListener) -> None:
        self._break_listeners.append(cb)

    # Lifecycle ---------------------------------------------------------
    def start(self, now_ms: int) -> None:
        now_ms = int(now_ms)
        self.pipeline.reset(now_ms)
        self.recorder.reset(now_ms)
        self.started_ms = now_ms
        self.last_break_ms = now_ms
        self.break_in_progress = False
        self.last_result = None
        self.frames = 0
        self.dropped_frames = 0
        self.active = True
        logger.info("Monitoring started (%s pipeline)", self.pipeline.kind)

    def stop(self) -> None:
        if not self.active:
            return
        self.active = False
        self.pipeline.detector.reset()
        self.recorder.stop()
        self.break_in_progress = False
        logger.info(
            "Monitoring stopped: %d frames, %d dropped, %d blinks",
            self.frames, self.dropped_frames, self.pipeline.total_blinks,
        )

    @property
    def total_blinks(self) -> int:
        return self.pipeline.total_blinks

    # Tick --------------------------------------------------------------
    def tick(self, image, now_ms: int) -> Optional[FrameResult]:
        """Run the landmark detector on a frame, then one pipeline step."""
        if not self.active:
            return None
        observation: Optional[FrameObservation] = None
        if image is not None and self.landmarker is not None:
            try:
                observation = self.landmarker.detect(image, int(now_ms))
            except Exception as e:
                self.dropped_frames += 1
                logger.warning("Landmark detector failed, frame dropped: %s", e)
                observation = None
        return self.process_observation(observation, now_ms)

    def process_observation(self, observation: Optional[FrameObservation], now_ms: int) -> Optional[FrameResult]:
        if not self.active:
            return None
        now_ms = int(now_ms)
        self.frames += 1
        result = self.pipeline.process(observation, now_ms)
        self.last_result = result
        self.recorder.maybe_emit(result.score, now_ms)
        for cb in list(self._score_listeners):
            cb(result)
        if self._should_request_break(result, now_ms):
            self.break_in_progress = True
            logger.info("Break requested (strain %.2f)", result.score.probability)
            for bcb in list(self._break_listeners):
                bcb(result.score)
        return result

    def report_blink(self, now_ms: int) -> None:
        if self.active:
            self.pipeline.report_blink(now_ms)

    # Breaks ------------------------------------------------------------
    def _should_request_break(self, result: FrameResult, now_ms: int) -> bool:
        if self.break_in_progress or self.do_not_disturb:
            return False
        if result.score.probability < self.config.caution_threshold:
            return False
        last = self.last_break_ms if self.last_break_ms is not None else now_ms
        return now_ms - last >= self.config.break_cooldown_ms

    def cooldown_remaining_ms(self, now_ms: int) -> int:
        if self.last_break_ms is None:
            return 0
        return max(0, self.config.break_cooldown_ms - (int(now_ms) - self.last_break_ms))

    def begin_break(self) -> bool:
        """A break started without a request (manual). False if one is running."""
        if not self.active or self.break_in_progress:
            return False
        self.break_in_progress = True
        return True

    def complete_break(self, now_ms: int) -> Optional[MetricRecord]:
        """The user finished a break: record it and restart the cooldown."""
        if not self.active:
            return None
        score = self.pipeline.current_score(int(now_ms))
        self.break_in_progress = False
        self.last_break_ms = int(now_ms)
        return self.recorder.emit_break(score)

    def skip_break(self, now_ms: int) -> None:
        self.break_in_progress = False
        self.last_break_ms = int(now_ms)
