import pytest

from DeskEye.analysis.synthetic import SyntheticDataGenerator
from DeskEye.core.settings import PipelineConfig
from DeskEye.tracking.landmarks import FrameObservation
from DeskEye.tracking.pipeline import LandmarkBasedPipeline, ModelBasedPipeline, build_pipeline

GEN = SyntheticDataGenerator(seed=1, noise=False)


def _obs(ts, ear, image=None):
    return FrameObservation(
        timestamp_ms=ts,
        left=GEN.generate_eye_landmarks(0.3, 0.3, ear),
        right=GEN.generate_eye_landmarks(0.7, 0.3, ear),
        image=image,
    )


class StubModel:
    ready = True

    def __init__(self, value=0.9, fail=False):
        self.value = value
        self.fail = fail
        self.calls = 0

    def predict(self, image):
        self.calls += 1
        if self.fail:
            raise RuntimeError("inference failed")
        return self.value


def test_landmark_pipeline_detects_blink_from_landmarks():
    p = LandmarkBasedPipeline(PipelineConfig())
    p.reset(0)
    blinks = []
    for i, ear in enumerate([0.30, 0.30, 0.10, 0.10, 0.30, 0.30]):
        res = p.process(_obs(i * 100, ear), i * 100)
        assert res.face_detected
        assert res.ear == pytest.approx(ear)
        if res.blink is not None:
            blinks.append(res.blink)
    assert len(blinks) == 1
    assert blinks[0].duration == 200
    assert p.total_blinks == 1


def test_no_face_still_ages_window():
    p = LandmarkBasedPipeline(PipelineConfig(window_size_ms=1000))
    p.reset(0)
    p.process(_obs(100, 0.30), 100)
    res = p.process(None, 500)
    assert not res.face_detected
    assert res.ear is None
    assert res.score.mean_ear == pytest.approx(0.30)
    res = p.process(None, 1200)
    assert res.score.mean_ear == 0.0
    assert res.level == "high"


def test_landmark_pipeline_uses_weighted_score():
    p = LandmarkBasedPipeline(PipelineConfig())
    p.reset(0)
    res = p.process(_obs(100, 0.27), 100)
    # no blinks yet: blink-rate factor is 1, EAR factor is 0
    assert res.score.probability == pytest.approx(0.6)
    assert res.level == "moderate"


def test_model_pipeline_without_model_uses_timer_bands():
    p = ModelBasedPipeline(PipelineConfig(pipeline="model"))
    assert p.using_fallback
    p.reset(0)
    assert p.process(_obs(1000, 0.30, image="frame"), 1000).score.probability == 0.4
    assert p.process(_obs(6000, 0.30, image="frame"), 6000).score.probability == 0.8


def test_model_pipeline_scores_predictions():
    model = StubModel(0.9)
    p = ModelBasedPipeline(PipelineConfig(pipeline="model"), model=model)
    assert not p.using_fallback
    p.reset(0)
    res = p.process(_obs(100, 0.30, image="frame"), 100)
    assert model.calls == 1
    assert res.score.probability == pytest.approx(0.9)
    assert res.level == "high"


def test_model_pipeline_skips_frames_without_image():
    model = StubModel(0.9)
    p = ModelBasedPipeline(PipelineConfig(pipeline="model"), model=model)
    p.reset(0)
    res = p.process(_obs(1000, 0.30), 1000)
    assert model.calls == 0
    assert res.score.probability == 0.4


def test_model_failure_falls_back():
    p = ModelBasedPipeline(PipelineConfig(pipeline="model"), model=StubModel(fail=True))
    p.reset(0)
    res = p.process(_obs(6000, 0.30, image="frame"), 6000)
    assert res.score.probability == 0.8


def test_manual_blink_report():
    p = LandmarkBasedPipeline(PipelineConfig())
    p.reset(0)
    ev = p.report_blink(500)
    assert ev.duration == 0
    assert p.window.blink_count(600) == 1


def test_build_pipeline_selects_variant():
    assert isinstance(build_pipeline(PipelineConfig()), LandmarkBasedPipeline)
    assert isinstance(build_pipeline(PipelineConfig(pipeline="model")), ModelBasedPipeline)
