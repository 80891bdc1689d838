import pytest

from DeskEye.utils.smoothing import Smoother, ema


def test_smoother_initializes_on_first_value():
    s = Smoother(alpha=0.5)
    assert s.apply(None) is None
    assert s.apply(1.0) == 1.0
    assert s.apply(0.0) == pytest.approx(0.5)
    assert s.apply(None) == pytest.approx(0.5)
    s.reset()
    assert s.value is None


def test_ema_fold():
    assert ema([], 0.3) is None
    assert ema([0.2, 0.6], 0.5) == pytest.approx(0.4)
