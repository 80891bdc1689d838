import json

import pytest

from DeskEye.core.errors import SettingsError
from DeskEye.core.settings import DEFAULT_SETTINGS, PipelineConfig, SettingsManager


def _write(path, data):
    path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
    return str(path)


def test_defaults_when_missing(tmp_path):
    s = SettingsManager(str(tmp_path / "nope.json"))
    assert s.data == DEFAULT_SETTINGS
    cfg = s.pipeline_config()
    assert cfg == PipelineConfig()
    assert cfg.frame_interval_ms == 100


def test_camel_case_aliases(tmp_path):
    p = _write(tmp_path / "s.json", {"earThreshold": 0.19, "windowSizeSec": 30, "doNotDisturb": True})
    cfg = SettingsManager(p).pipeline_config()
    assert cfg.ear_threshold == pytest.approx(0.19)
    assert cfg.window_size_ms == 30000
    assert cfg.do_not_disturb


def test_nested_merge_keeps_defaults(tmp_path):
    p = _write(tmp_path / "s.json", {"thresholds": {"caution": 0.8}})
    s = SettingsManager(p)
    assert s.thresholds() == (0.4, 0.8)


def test_invalid_values_rejected(tmp_path):
    p = _write(tmp_path / "s.json", {"pipeline": "magic"})
    with pytest.raises(SettingsError):
        SettingsManager(p).pipeline_config()
    p = _write(tmp_path / "t.json", {"thresholds": {"ok": 0.9, "caution": 0.5}})
    with pytest.raises(SettingsError):
        SettingsManager(p).pipeline_config()


def test_corrupt_file_falls_back(tmp_path):
    p = _write(tmp_path / "s.json", "{oops")
    assert SettingsManager(p).framerate() == 10


def test_non_object_rejected(tmp_path):
    p = _write(tmp_path / "s.json", [1, 2])
    with pytest.raises(SettingsError):
        SettingsManager(p)


def test_save_round_trip(tmp_path):
    path = str(tmp_path / "sub" / "s.json")
    s = SettingsManager(path)
    s.update({"pipeline": "model", "camera_index": 2})
    s.set_do_not_disturb(True)
    s.save()
    again = SettingsManager(path)
    assert again.pipeline_kind() == "model"
    assert again.camera_index() == 2
    assert again.do_not_disturb()


def test_wrong_typed_value_is_settings_error(tmp_path):
    p = _write(tmp_path / "s.json", {"framerate": "abc"})
    with pytest.raises(SettingsError):
        SettingsManager(p).pipeline_config()
    p = _write(tmp_path / "t.json", {"thresholds": {"ok": None}})
    with pytest.raises(SettingsError):
        SettingsManager(p).pipeline_config()


def test_main_rejects_wrong_typed_settings(tmp_path):
    from DeskEye.app import main

    p = _write(tmp_path / "s.json", {"data_retention_days": "forever"})
    assert main(["--mode", "headless", "--settings", p, "--data-dir", str(tmp_path / "data")]) == 2
