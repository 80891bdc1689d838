from DeskEye.tracking.events import EARSample
from DeskEye.utils.blink import BlinkDetector, Phase


def _feed(det, values, step_ms=100, start_ms=0):
    events = []
    for i, v in enumerate(values):
        ev = det.update(EARSample(timestamp=start_ms + i * step_ms, value=v))
        if ev is not None:
            events.append(ev)
    return events


def test_single_blink_at_10fps():
    det = BlinkDetector(ear_threshold=0.21, max_blink_duration_ms=300)
    events = _feed(det, [0.30, 0.30, 0.10, 0.10, 0.30, 0.30])
    assert len(events) == 1
    ev = events[0]
    assert ev.start_time == 200
    assert ev.end_time == 400
    assert ev.duration == 200
    assert ev.timestamp == 200


def test_long_closure_is_not_a_blink():
    det = BlinkDetector(ear_threshold=0.21, max_blink_duration_ms=300)
    events = _feed(det, [0.30, 0.10, 0.10, 0.10, 0.10, 0.30])
    assert events == []
    assert det.phase is Phase.OPEN


def test_duration_at_limit_is_rejected():
    det = BlinkDetector(ear_threshold=0.21, max_blink_duration_ms=300)
    assert _feed(det, [0.30, 0.10, 0.10, 0.10, 0.30]) == []


def test_threshold_is_strict():
    det = BlinkDetector(ear_threshold=0.21)
    assert _feed(det, [0.30, 0.21, 0.30]) == []
    assert det.phase is Phase.OPEN


def test_reset_discards_open_episode():
    det = BlinkDetector()
    _feed(det, [0.30, 0.10])
    assert det.phase is Phase.CLOSED
    det.reset()
    assert det.phase is Phase.OPEN
    assert det.update(EARSample(timestamp=250, value=0.30)) is None


def test_nan_samples_are_ignored():
    det = BlinkDetector()
    events = _feed(det, [0.30, 0.10, float("nan"), 0.30])
    assert len(events) == 1
    assert events[0].duration == 200
