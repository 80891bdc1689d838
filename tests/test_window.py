import pytest

from DeskEye.tracking.events import BlinkEvent, EARSample
from DeskEye.tracking.window import SlidingWindow


def test_empty_window_reads_zero():
    w = SlidingWindow(window_ms=15000)
    assert w.blink_rate(1000) == 0.0
    assert w.mean_ear(1000) == 0.0
    assert w.blink_count(1000) == 0


def test_blink_rate_scales_to_per_minute():
    w = SlidingWindow(window_ms=15000)
    w.record_blink(BlinkEvent(start_time=1000, end_time=1150, duration=150))
    w.record_blink(BlinkEvent(start_time=5000, end_time=5100, duration=100))
    assert w.blink_rate(6000) == pytest.approx(8.0)


def test_entries_expire_after_window():
    w = SlidingWindow(window_ms=15000)
    w.record_blink(BlinkEvent(start_time=1000, end_time=1150, duration=150))
    w.record_sample(EARSample(timestamp=1000, value=0.3))
    w.record_sample(EARSample(timestamp=2000, value=0.2))
    assert w.blink_count(15999) == 1
    assert w.blink_count(16000) == 0
    assert w.mean_ear(16000) == pytest.approx(0.2)
    assert w.mean_ear(17000) == 0.0
    # lifetime counter is not pruned
    assert w.total_blinks == 1


def test_reset_clears_and_marks_last_blink():
    w = SlidingWindow(window_ms=1000)
    w.record_blink(BlinkEvent(start_time=10, end_time=20, duration=10))
    assert w.last_blink_ms == 20
    w.reset(now_ms=500)
    assert w.total_blinks == 0
    assert w.ms_since_last_blink(800) == 300
    w.reset()
    assert w.ms_since_last_blink(800) is None


def test_non_positive_window_rejected():
    with pytest.raises(ValueError):
        SlidingWindow(window_ms=0)
