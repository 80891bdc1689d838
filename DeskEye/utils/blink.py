"""
Blink detection from a stream of EAR samples.

Two states, OPEN (initial) and CLOSED:
- OPEN -> CLOSED when EAR drops below ear_threshold; remember closed_since.
- CLOSED -> OPEN when EAR is back at or above the threshold. The episode is a
  blink only if it lasted less than max_blink_duration_ms; longer closures
  (eyes shut, looking away) produce nothing.

Exactly one event per CLOSED episode, decided on the return to OPEN.

Usage:
    det = BlinkDetector(ear_threshold=0.21, max_blink_duration_ms=300)
    event = det.update(EARSample(timestamp=1200, value=0.12))
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from DeskEye.tracking.events import BlinkEvent, EARSample

logger = logging.getLogger(__name__)


class Phase(Enum):
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class DetectorState:
    phase: Phase = Phase.OPEN
    closed_since: Optional[int] = None


class BlinkDetector:
    def __init__(
        self,
        ear_threshold: float = 0.21,
        max_blink_duration_ms: int = 300,
    ) -> None:
        self.ear_threshold = float(ear_threshold)
        self.max_blink_duration_ms = int(max_blink_duration_ms)
        self.state = DetectorState()

    # Public API ---------------------------------------------------------
    def reset(self) -> None:
        """Back to OPEN; an unfinished closure is dropped, not flushed."""
        self.state = DetectorState()

    @property
    def phase(self) -> Phase:
        return self.state.phase

    def update(self, sample: EARSample) -> Optional[BlinkEvent]:
        """Feed one EAR sample; returns a BlinkEvent when a blink just ended."""
        ear = float(sample.value)
        if ear != ear:  # NaN check
            return None

        st = self.state
        if st.phase is Phase.OPEN:
            if ear < self.ear_threshold:
                st.phase = Phase.CLOSED
                st.closed_since = int(sample.timestamp)
            return None

        # CLOSED
        if ear < self.ear_threshold:
            return None

        start = int(st.closed_since if st.closed_since is not None else sample.timestamp)
        end = int(sample.timestamp)
        duration = end - start
        st.phase = Phase.OPEN
        st.closed_since = None
        if duration < self.max_blink_duration_ms:
            return BlinkEvent(start_time=start, end_time=end, duration=duration)
        logger.debug("closure of %d ms ignored (>= %d ms)", duration, self.max_blink_duration_ms)
        return None
