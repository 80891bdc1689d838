from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from DeskEye.core.settings import PipelineConfig
from DeskEye.utils.blink import BlinkDetector
from .ear import combined_ear
from .events import BlinkEvent, EARSample, StrainScore
from .landmarks import FrameObservation
from .scoring import (
    BlinkTimerStrainScorer,
    ModelStrainScorer,
    StrainScorer,
    WeightedStrainScorer,
    strain_level,
)
from .window import SlidingWindow

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    score: StrainScore
    level: str
    ear: Optional[float]
    blink: Optional[BlinkEvent]
    face_detected: bool


class StrainPipeline:
    """Landmarks -> EAR -> blink detector -> window -> strain score.

    Subclasses only choose the scorer (and may look at the raw frame).
    """

    kind = "base"

    def __init__(self, config: PipelineConfig, scorer: StrainScorer) -> None:
        self.config = config
        self.detector = BlinkDetector(
            ear_threshold=config.ear_threshold,
            max_blink_duration_ms=config.max_blink_duration_ms,
        )
        self.window = SlidingWindow(window_ms=config.window_size_ms)
        self.scorer = scorer

    def reset(self, now_ms: Optional[int] = None) -> None:
        self.detector.reset()
        self.window.reset(now_ms)
        self.scorer.reset(now_ms)

    @property
    def total_blinks(self) -> int:
        return self.window.total_blinks

    # Ingest ------------------------------------------------------------
    def ingest_ear(self, value: float, timestamp_ms: int) -> Optional[BlinkEvent]:
        sample = EARSample(timestamp=int(timestamp_ms), value=float(value))
        self.window.record_sample(sample)
        event = self.detector.update(sample)
        if event is not None:
            self.window.record_blink(event)
            logger.debug("blink %d ms at %d", event.duration, event.start_time)
        return event

    def report_blink(self, timestamp_ms: int) -> BlinkEvent:
        """Record a blink detected outside the EAR path (manual input)."""
        ts = int(timestamp_ms)
        event = BlinkEvent(start_time=ts, end_time=ts, duration=0)
        self.window.record_blink(event)
        return event

    def observe(self, observation: FrameObservation) -> None:
        """Hook for variants that use the raw frame."""

    # Tick --------------------------------------------------------------
    def process(self, observation: Optional[FrameObservation], now_ms: int) -> FrameResult:
        ear: Optional[float] = None
        blink: Optional[BlinkEvent] = None
        face = observation is not None and observation.has_eyes
        if observation is not None:
            self.observe(observation)
            if face:
                ear = combined_ear(observation.left, observation.right)
                if ear is not None:
                    blink = self.ingest_ear(ear, observation.timestamp_ms)
        score = self.current_score(now_ms)
        level = strain_level(score.probability, self.config.ok_threshold, self.config.caution_threshold)
        return FrameResult(score=score, level=level, ear=ear, blink=blink, face_detected=face)

    def current_score(self, now_ms: int) -> StrainScore:
        now_ms = int(now_ms)
        return StrainScore(
            blink_rate=self.window.blink_rate(now_ms),
            mean_ear=self.window.mean_ear(now_ms),
            probability=self.scorer.score(self.window, now_ms),
            timestamp=now_ms,
        )


class LandmarkBasedPipeline(StrainPipeline):
    kind = "feature"

    def __init__(self, config: PipelineConfig) -> None:
        super().__init__(
            config,
            WeightedStrainScorer(normal_blink_rate=config.normal_blink_rate, normal_ear=config.normal_ear),
        )


class ModelBasedPipeline(StrainPipeline):
    kind = "model"

    def __init__(self, config: PipelineConfig, model=None) -> None:
        super().__init__(
            config,
            ModelStrainScorer(
                window_ms=config.window_size_ms,
                alpha=config.model_smoothing_alpha,
                fallback=BlinkTimerStrainScorer(),
            ),
        )
        self.model = model

    @property
    def using_fallback(self) -> bool:
        return self.model is None or not getattr(self.model, "ready", True)

    def observe(self, observation: FrameObservation) -> None:
        if self.using_fallback or observation.image is None:
            return
        try:
            p = self.model.predict(observation.image)
        except Exception as e:
            logger.warning("Strain model prediction failed: %s", e)
            return
        if p is None:
            return
        self.scorer.record_prediction(observation.timestamp_ms, p)  # type: ignore[attr-defined]


def build_pipeline(config: PipelineConfig, model=None) -> StrainPipeline:
    if config.pipeline == "model":
        return ModelBasedPipeline(config, model=model)
    return LandmarkBasedPipeline(config)
