"""
Periodic metric emission.

While monitoring, one MetricRecord goes to the sink every interval; a
completed break produces an extra record with break_taken=True. Emission is
fire-and-forget: a failing sink is logged and the next interval tries again
with fresh data, nothing is retried or queued.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from DeskEye.tracking.events import StrainScore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricRecord:
    timestamp: int  # epoch ms
    blink_rate: float
    avg_ear: float
    strain_score: float
    break_taken: bool = False

    @classmethod
    def from_score(cls, score: StrainScore, timestamp_ms: int, break_taken: bool = False) -> "MetricRecord":
        return cls(
            timestamp=int(timestamp_ms),
            blink_rate=float(score.blink_rate),
            avg_ear=float(score.mean_ear),
            strain_score=float(score.probability),
            break_taken=bool(break_taken),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "blinkRate": self.blink_rate,
            "avgEAR": self.avg_ear,
            "strainScore": self.strain_score,
            "breakTaken": self.break_taken,
        }


MetricSink = Callable[[MetricRecord], Any]


def epoch_ms() -> int:
    return int(time.time() * 1000)


class MetricRecorder:
    def __init__(
        self,
        sink: Optional[MetricSink] = None,
        interval_ms: int = 15000,
        wall_clock: Callable[[], int] = epoch_ms,
    ) -> None:
        self.sink = sink
        self.interval_ms = int(interval_ms)
        self.wall_clock = wall_clock
        self._last_emit_ms: Optional[int] = None
        self.emitted = 0
        self.failures = 0

    def reset(self, now_ms: int) -> None:
        self._last_emit_ms = int(now_ms)

    def stop(self) -> None:
        self._last_emit_ms = None

    @property
    def active(self) -> bool:
        return self._last_emit_ms is not None

    def due(self, now_ms: int) -> bool:
        return self._last_emit_ms is not None and int(now_ms) - self._last_emit_ms >= self.interval_ms

    def maybe_emit(self, score: StrainScore, now_ms: int) -> Optional[MetricRecord]:
        if not self.due(now_ms):
            return None
        self._last_emit_ms = int(now_ms)
        return self._emit(MetricRecord.from_score(score, self.wall_clock()))

    def emit_break(self, score: StrainScore) -> MetricRecord:
        return self._emit(MetricRecord.from_score(score, self.wall_clock(), break_taken=True))

    def _emit(self, record: MetricRecord) -> MetricRecord:
        if self.sink is None:
            return record
        try:
            self.sink(record)
            self.emitted += 1
        except Exception:
            self.failures += 1
            logger.exception("Failed to save metric record at %d", record.timestamp)
        return record
