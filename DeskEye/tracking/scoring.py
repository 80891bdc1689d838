"""
Strain probability scorers.

All scorers share one interface, score(window, now_ms) -> probability in
[0, 1], so a pipeline can swap them without touching its consumers:

- WeightedStrainScorer: blink-rate and EAR deficits, 60/40 weighted.
- BlinkTimerStrainScorer: fixed bands on time since the last blink; used
  when there is nothing better to go on.
- ModelStrainScorer: EMA over recent model predictions, falling back to the
  timer bands while no prediction is available.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Optional, Tuple

from DeskEye.utils.smoothing import ema
from .window import SlidingWindow

NORMAL_BLINK_RATE = 17.0  # blinks / minute
NORMAL_EAR = 0.27
BLINK_RATE_WEIGHT = 0.6
EAR_WEIGHT = 0.4


def clamp01(v: float) -> float:
    return max(0.0, min(1.0, float(v)))


def strain_probability(
    blink_rate: float,
    mean_ear: float,
    normal_blink_rate: float = NORMAL_BLINK_RATE,
    normal_ear: float = NORMAL_EAR,
) -> float:
    """Weighted deficit of blink rate and EAR against their normal values."""
    blink_rate_factor = max(0.0, 1.0 - blink_rate / normal_blink_rate)
    ear_factor = max(0.0, 1.0 - mean_ear / normal_ear)
    return clamp01(BLINK_RATE_WEIGHT * blink_rate_factor + EAR_WEIGHT * ear_factor)


def blink_timer_probability(ms_since_last_blink: Optional[int], blink_rate: float) -> float:
    if ms_since_last_blink is not None:
        if ms_since_last_blink > 5000:
            return 0.8
        if ms_since_last_blink > 3000:
            return 0.5
    if blink_rate < 10:
        return 0.4
    return 0.2


def strain_level(probability: float, ok: float = 0.4, caution: float = 0.7) -> str:
    if probability < ok:
        return "low"
    if probability < caution:
        return "moderate"
    return "high"


class StrainScorer:
    name = "base"

    def reset(self, now_ms: Optional[int] = None) -> None:
        pass

    def score(self, window: SlidingWindow, now_ms: int) -> float:
        raise NotImplementedError


class WeightedStrainScorer(StrainScorer):
    name = "weighted"

    def __init__(self, normal_blink_rate: float = NORMAL_BLINK_RATE, normal_ear: float = NORMAL_EAR) -> None:
        self.normal_blink_rate = float(normal_blink_rate)
        self.normal_ear = float(normal_ear)

    def score(self, window: SlidingWindow, now_ms: int) -> float:
        return strain_probability(
            window.blink_rate(now_ms),
            window.mean_ear(now_ms),
            self.normal_blink_rate,
            self.normal_ear,
        )


class BlinkTimerStrainScorer(StrainScorer):
    name = "blink-timer"

    def score(self, window: SlidingWindow, now_ms: int) -> float:
        return blink_timer_probability(window.ms_since_last_blink(now_ms), window.blink_rate(now_ms))


class ModelStrainScorer(StrainScorer):
    name = "model"

    def __init__(self, window_ms: int = 15000, alpha: float = 0.3, fallback: Optional[StrainScorer] = None) -> None:
        self.window_ms = int(window_ms)
        self.alpha = float(alpha)
        self.fallback = fallback or BlinkTimerStrainScorer()
        self._predictions: Deque[Tuple[int, float]] = deque()

    def reset(self, now_ms: Optional[int] = None) -> None:
        self._predictions.clear()
        self.fallback.reset(now_ms)

    def record_prediction(self, timestamp_ms: int, probability: float) -> None:
        self._predictions.append((int(timestamp_ms), clamp01(probability)))

    def _prune(self, now_ms: int) -> None:
        cutoff = int(now_ms) - self.window_ms
        while self._predictions and self._predictions[0][0] <= cutoff:
            self._predictions.popleft()

    def prediction_count(self, now_ms: int) -> int:
        self._prune(now_ms)
        return len(self._predictions)

    def score(self, window: SlidingWindow, now_ms: int) -> float:
        self._prune(now_ms)
        if not self._predictions:
            return self.fallback.score(window, now_ms)
        smoothed = ema((p for _, p in self._predictions), alpha=self.alpha)
        return clamp01(smoothed if smoothed is not None else 0.0)
