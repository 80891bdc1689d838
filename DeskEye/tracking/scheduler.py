"""
Single-threaded tick loop.

Calls callback(now_ms) at a target rate on a monotonic clock. If a tick
finishes early the loop sleeps the remainder of the interval; if it overruns,
the next tick starts immediately (cadence drops, ticks never overlap).
"""
from __future__ import annotations

import logging
import time
from collections import deque
from typing import Callable, Deque, Optional

logger = logging.getLogger(__name__)


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class FPSMonitor:
    def __init__(self, window: int = 60) -> None:
        self.window = max(1, int(window))
        self._intervals: Deque[float] = deque(maxlen=self.window)
        self._last: Optional[float] = None

    def reset(self) -> None:
        self._intervals.clear()
        self._last = None

    def tick(self, now: float) -> None:
        if self._last is not None:
            self._intervals.append(now - self._last)
        self._last = now

    def fps(self) -> float:
        if not self._intervals:
            return 0.0
        avg = sum(self._intervals) / float(len(self._intervals))
        if avg <= 0:
            return 0.0
        return 1.0 / avg


class TickLoop:
    def __init__(
        self,
        callback: Callable[[int], None],
        framerate: int = 10,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if int(framerate) <= 0:
            raise ValueError("framerate must be positive")
        self.callback = callback
        self.framerate = int(framerate)
        self.interval = 1.0 / float(self.framerate)
        self._clock = clock
        self._sleep = sleep
        self._running = False
        self.ticks = 0
        self.fps_monitor = FPSMonitor(window=max(10, self.framerate * 3))

    @property
    def running(self) -> bool:
        return self._running

    def stop(self) -> None:
        self._running = False

    def fps(self) -> float:
        return self.fps_monitor.fps()

    def run(self, max_ticks: Optional[int] = None, duration_s: Optional[float] = None) -> int:
        """Block until stop(), max_ticks or duration_s; returns ticks run."""
        self._running = True
        self.ticks = 0
        self.fps_monitor.reset()
        started = self._clock()
        try:
            while self._running:
                if max_ticks is not None and self.ticks >= max_ticks:
                    break
                t0 = self._clock()
                if duration_s is not None and t0 - started >= duration_s:
                    break
                self.fps_monitor.tick(t0)
                self.callback(int(t0 * 1000))
                self.ticks += 1
                remaining = self.interval - (self._clock() - t0)
                if remaining > 0 and self._running:
                    self._sleep(remaining)
        finally:
            self._running = False
        logger.debug("Tick loop ended after %d ticks (%.1f fps)", self.ticks, self.fps())
        return self.ticks
