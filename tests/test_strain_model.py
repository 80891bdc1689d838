import numpy as np
import pytest

from DeskEye.ai.strain_model import INPUT_SIZE, FrameStrainModel, preprocess
from DeskEye.core.errors import ModelError


def _frames(n, bright, rng):
    base = 200 if bright else 40
    return [np.clip(rng.normal(base, 10, (48, 64, 3)), 0, 255).astype(np.uint8) for _ in range(n)]


def test_preprocess_shape_and_range():
    img = np.full((30, 40, 3), 255, dtype=np.uint8)
    x = preprocess(img)
    assert x.shape == (INPUT_SIZE * INPUT_SIZE,)
    assert x.max() == pytest.approx(1.0)
    with pytest.raises(ValueError):
        preprocess(np.zeros((2, 2, 2, 2)))


def test_fit_predict_save_load(tmp_path):
    rng = np.random.default_rng(0)
    imgs = _frames(10, True, rng) + _frames(10, False, rng)
    labels = [0] * 10 + [1] * 10
    model = FrameStrainModel().fit(imgs, labels)
    assert model.ready
    p_dark = model.predict(_frames(1, False, rng)[0])
    p_bright = model.predict(_frames(1, True, rng)[0])
    assert 0.0 <= p_bright < p_dark <= 1.0

    path = str(tmp_path / "m" / "strain.pkl")
    model.save(path)
    loaded = FrameStrainModel.load(path)
    assert loaded.predict(imgs[0]) == pytest.approx(model.predict(imgs[0]))


def test_untrained_model():
    m = FrameStrainModel()
    assert not m.ready
    assert m.predict(np.zeros((10, 10), dtype=np.uint8)) is None
    with pytest.raises(ModelError):
        m.save("x.pkl")


def test_load_missing(tmp_path):
    with pytest.raises(ModelError):
        FrameStrainModel.load(str(tmp_path / "missing.pkl"))
