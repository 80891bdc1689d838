from __future__ import annotations

from typing import Any, Iterable, List

from DeskEye.tracking.events import BlinkEvent, EARSample


def replay_ear_sequence(pipeline, frames: Iterable[Any]) -> List[BlinkEvent]:
    """Feed recorded EAR values through a pipeline in order.

    Frames are EARSample objects or dicts with "timestamp" and "ear" (the
    shape written by SyntheticDataGenerator). Returns the emitted blinks.
    """
    events: List[BlinkEvent] = []
    for f in frames:
        if isinstance(f, EARSample):
            ts, value = f.timestamp, f.value
        else:
            ts, value = f["timestamp"], f["ear"]
        ev = pipeline.ingest_ear(value, ts)
        if ev is not None:
            events.append(ev)
    return events
