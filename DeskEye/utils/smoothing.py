"""
EMA smoothing for scalar strain predictions.

Two APIs:
- Smoother: stateful, apply(value) -> smoothed value; handles None safely.
- ema(values, alpha): one-shot fold over a sequence, oldest first.
"""
from __future__ import annotations

from typing import Iterable, Optional


class Smoother:
    def __init__(self, alpha: float = 0.3) -> None:
        self.alpha = max(0.0, min(1.0, float(alpha)))
        self._state: Optional[float] = None

    def reset(self) -> None:
        self._state = None

    @property
    def value(self) -> Optional[float]:
        return self._state

    def apply(self, value: Optional[float]) -> Optional[float]:
        """Apply EMA smoothing.

        - First non-None input initializes state and returns it.
        - If value is None, returns the last state (or None before any input).
        """
        if value is None:
            return self._state
        v = float(value)
        if self._state is None:
            self._state = v
        else:
            self._state = self.alpha * v + (1 - self.alpha) * self._state
        return self._state


def ema(values: Iterable[float], alpha: float = 0.3) -> Optional[float]:
    s = Smoother(alpha=alpha)
    out: Optional[float] = None
    for v in values:
        out = s.apply(v)
    return out
