"""
Event dataclasses flowing through the strain pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EARSample:
    timestamp: int
    value: float


@dataclass(frozen=True)
class BlinkEvent:
    start_time: int
    end_time: int
    duration: int

    @property
    def timestamp(self) -> int:
        # Window position of a blink is where it started
        return self.start_time


@dataclass(frozen=True)
class StrainScore:
    blink_rate: float
    mean_ear: float
    probability: float
    timestamp: int
