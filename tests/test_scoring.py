import pytest

from DeskEye.tracking.events import BlinkEvent
from DeskEye.tracking.scoring import (
    BlinkTimerStrainScorer,
    ModelStrainScorer,
    WeightedStrainScorer,
    blink_timer_probability,
    strain_level,
    strain_probability,
)
from DeskEye.tracking.window import SlidingWindow


def test_probability_endpoints():
    assert strain_probability(17, 0.27) == pytest.approx(0.0)
    assert strain_probability(0, 0) == pytest.approx(1.0)
    assert strain_probability(30, 0.4) == 0.0


def test_reduced_blinking_and_narrow_eyes():
    p = strain_probability(8, 0.20)
    assert 0.4 < p < 0.8
    assert p == pytest.approx(0.421, abs=1e-3)


def test_probability_monotonic_in_each_input():
    rates = [0, 2, 5, 8, 12, 17, 25]
    ears = [0.0, 0.1, 0.2, 0.25, 0.27, 0.35]
    for ear in ears:
        ps = [strain_probability(r, ear) for r in rates]
        assert all(a >= b for a, b in zip(ps, ps[1:]))
    for r in rates:
        ps = [strain_probability(r, e) for e in ears]
        assert all(a >= b for a, b in zip(ps, ps[1:]))


def test_timer_bands():
    assert blink_timer_probability(6000, 20) == 0.8
    assert blink_timer_probability(5000, 20) == 0.5
    assert blink_timer_probability(3500, 20) == 0.5
    assert blink_timer_probability(3000, 5) == 0.4
    assert blink_timer_probability(1000, 12) == 0.2
    assert blink_timer_probability(None, 12) == 0.2


def test_levels():
    assert strain_level(0.1) == "low"
    assert strain_level(0.4) == "moderate"
    assert strain_level(0.69) == "moderate"
    assert strain_level(0.7) == "high"


def test_weighted_scorer_reads_window():
    w = SlidingWindow(window_ms=60000)
    s = WeightedStrainScorer()
    assert s.score(w, 1000) == pytest.approx(1.0)


def test_timer_scorer_uses_last_blink():
    w = SlidingWindow(window_ms=15000)
    w.reset(now_ms=0)
    s = BlinkTimerStrainScorer()
    assert s.score(w, 1000) == 0.4
    assert s.score(w, 6000) == 0.8
    w.record_blink(BlinkEvent(start_time=5800, end_time=5900, duration=100))
    assert s.score(w, 6000) == 0.4


def test_model_scorer_smooths_and_falls_back():
    w = SlidingWindow(window_ms=15000)
    w.reset(now_ms=0)
    s = ModelStrainScorer(window_ms=15000, alpha=0.5)
    assert s.score(w, 6000) == 0.8  # fallback band
    s.record_prediction(1000, 0.2)
    s.record_prediction(2000, 0.6)
    assert s.score(w, 3000) == pytest.approx(0.4)
    assert s.prediction_count(3000) == 2
    # predictions age out and the fallback takes over again
    assert s.prediction_count(17000) == 0
    assert s.score(w, 17000) == 0.8
