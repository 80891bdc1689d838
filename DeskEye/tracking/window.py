"""
Sliding time window over EAR samples and blink events.

Entries are kept while timestamp > now - window_ms. Every read prunes first,
so callers never see stale data even if nothing was recorded for a while.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Optional

from .events import BlinkEvent, EARSample


class SlidingWindow:
    def __init__(self, window_ms: int = 15000) -> None:
        if int(window_ms) <= 0:
            raise ValueError("window_ms must be positive")
        self.window_ms = int(window_ms)
        self._samples: Deque[EARSample] = deque()
        self._blinks: Deque[BlinkEvent] = deque()
        # Lifetime counter, never pruned
        self.total_blinks = 0
        self.last_blink_ms: Optional[int] = None

    def reset(self, now_ms: Optional[int] = None) -> None:
        self._samples.clear()
        self._blinks.clear()
        self.total_blinks = 0
        self.last_blink_ms = None if now_ms is None else int(now_ms)

    # Writes ------------------------------------------------------------
    def record_sample(self, sample: EARSample) -> None:
        self._samples.append(sample)

    def record_blink(self, event: BlinkEvent) -> None:
        self._blinks.append(event)
        self.total_blinks += 1
        self.last_blink_ms = int(event.end_time)

    def prune_expired(self, now_ms: int) -> None:
        cutoff = int(now_ms) - self.window_ms
        while self._samples and self._samples[0].timestamp <= cutoff:
            self._samples.popleft()
        while self._blinks and self._blinks[0].timestamp <= cutoff:
            self._blinks.popleft()

    # Reads -------------------------------------------------------------
    @property
    def window_minutes(self) -> float:
        return self.window_ms / 60000.0

    def blink_count(self, now_ms: int) -> int:
        self.prune_expired(now_ms)
        return len(self._blinks)

    def blink_rate(self, now_ms: int) -> float:
        """Blinks per minute over the window."""
        n = self.blink_count(now_ms)
        if n == 0:
            return 0.0
        return n / self.window_minutes

    def mean_ear(self, now_ms: int) -> float:
        self.prune_expired(now_ms)
        if not self._samples:
            return 0.0
        return sum(s.value for s in self._samples) / float(len(self._samples))

    def sample_count(self, now_ms: int) -> int:
        self.prune_expired(now_ms)
        return len(self._samples)

    def ms_since_last_blink(self, now_ms: int) -> Optional[int]:
        if self.last_blink_ms is None:
            return None
        return int(now_ms) - self.last_blink_ms
