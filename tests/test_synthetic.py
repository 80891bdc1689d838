import json

import pytest

from DeskEye.analysis.replay import replay_ear_sequence
from DeskEye.analysis.synthetic import SyntheticDataGenerator
from DeskEye.core.settings import PipelineConfig
from DeskEye.tracking.ear import eye_aspect_ratio
from DeskEye.tracking.landmarks import (
    FACE_MESH_POINTS,
    LEFT_EYE_INDICES,
    RIGHT_EYE_INDICES,
    EyeLandmarkSet,
)
from DeskEye.tracking.pipeline import LandmarkBasedPipeline


def _completed_episodes(frames):
    n = 0
    for prev, cur in zip(frames, frames[1:]):
        if prev["isBlink"] and not cur["isBlink"]:
            n += 1
    return n


@pytest.mark.parametrize("noise", [False, True])
def test_replay_reproduces_blink_count(noise):
    gen = SyntheticDataGenerator(seed=7, noise=noise)
    frames = gen.generate_ear_sequence(60, "normal", 10)
    assert len(frames) == 600
    expected = _completed_episodes(frames)
    assert expected > 0

    pipe = LandmarkBasedPipeline(PipelineConfig(window_size_ms=60000))
    pipe.reset(0)
    events = replay_ear_sequence(pipe, frames)
    assert len(events) == expected
    now = frames[-1]["timestamp"]
    assert pipe.window.blink_rate(now) == pytest.approx(expected / 1.0)


def test_generated_eye_has_requested_ear():
    gen = SyntheticDataGenerator(seed=3)
    for ear in (0.10, 0.20, 0.27):
        eye = gen.generate_eye_landmarks(0.4, 0.4, ear)
        assert eye_aspect_ratio(eye) == pytest.approx(ear)


def test_full_mesh_places_both_eyes():
    gen = SyntheticDataGenerator(seed=3)
    pts = gen.generate_landmarks(0.2)
    assert len(pts) == FACE_MESH_POINTS
    for idx in (LEFT_EYE_INDICES, RIGHT_EYE_INDICES):
        assert eye_aspect_ratio(EyeLandmarkSet.from_mesh(pts, idx)) == pytest.approx(0.2)


def test_seed_makes_sequences_repeatable():
    a = SyntheticDataGenerator(seed=11).generate_ear_sequence(5, "mixed")
    b = SyntheticDataGenerator(seed=11).generate_ear_sequence(5, "mixed")
    assert a == b


def test_metrics_dataset_ranges():
    rows = SyntheticDataGenerator(seed=5).generate_metrics_dataset(50, "strained", now_ms=10 ** 6)
    assert len(rows) == 50
    assert rows[-1]["timestamp"] == 10 ** 6 - 15000
    for r in rows:
        assert 5 <= r["blinkRate"] <= 25
        assert 0.15 <= r["avgEAR"] <= 0.35
        assert 0 <= r["strainScore"] <= 1


def test_unknown_condition():
    with pytest.raises(ValueError):
        SyntheticDataGenerator().generate_ear_sequence(1, "sleepy")


def test_generate_test_dataset_writes_json(tmp_path):
    paths = SyntheticDataGenerator(seed=2).generate_test_dataset(str(tmp_path))
    assert len(paths) == 7
    with open(tmp_path / "sample_landmarks.json", encoding="utf-8") as f:
        data = json.load(f)
    assert set(data) == {"normal", "strained", "blinking"}
    assert len(data["normal"]) == FACE_MESH_POINTS


def test_per_eye_ear_stays_in_range():
    gen = SyntheticDataGenerator(seed=3, noise=True)
    for condition in ("normal", "strained", "mixed"):
        for f in gen.generate_ear_sequence(30, condition, 10):
            for key in ("ear", "leftEAR", "rightEAR"):
                assert 0.1 <= f[key] <= 0.4
