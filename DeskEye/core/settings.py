"""
Settings manager for DeskEye.

Loads/saves JSON settings (default ~/.deskeye/settings.json), merges them over
DEFAULT_SETTINGS and exposes typed accessors. PipelineConfig is the frozen,
validated view the pipeline is built from.
"""
from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import SettingsError

logger = logging.getLogger(__name__)

DEFAULT_BASE_DIR = os.path.join(os.path.expanduser("~"), ".deskeye")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "pipeline": "feature",  # "feature" or "model"
    "framerate": 10,
    "window_size_sec": 15,
    "ear_threshold": 0.21,
    "max_blink_duration_ms": 300,
    "normal_blink_rate": 17.0,
    "normal_ear": 0.27,
    "thresholds": {"ok": 0.4, "caution": 0.7},
    "break_cooldown_sec": 120,
    "break_duration_sec": 20,
    "metric_interval_sec": 15,
    "model_smoothing_alpha": 0.3,
    "model_path": None,
    "camera_index": 0,
    "do_not_disturb": False,
    "data_retention_days": 90,
    "logging": {"level": "INFO", "file": None},
}

# camelCase spellings used by older settings files
_ALIASES = {
    "earThreshold": "ear_threshold",
    "maxBlinkDurationMs": "max_blink_duration_ms",
    "windowSizeSec": "window_size_sec",
    "windowSize": "window_size_sec",
    "normalBlinkRate": "normal_blink_rate",
    "normalEAR": "normal_ear",
    "doNotDisturb": "do_not_disturb",
    "breakCooldownSec": "break_cooldown_sec",
}

PIPELINE_KINDS = ("feature", "model")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in override.items():
        k = _ALIASES.get(k, k)
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


class SettingsManager:
    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or os.path.join(DEFAULT_BASE_DIR, "settings.json")
        self.data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        if not os.path.exists(self.path):
            self.data = copy.deepcopy(DEFAULT_SETTINGS)
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read settings %s (%s); using defaults", self.path, e)
            self.data = copy.deepcopy(DEFAULT_SETTINGS)
            return
        if not isinstance(raw, dict):
            raise SettingsError(f"{self.path}: top level must be an object")
        self.data = _merge(DEFAULT_SETTINGS, raw)

    def save(self) -> None:
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.data, f, indent=2)

    def update(self, values: Dict[str, Any]) -> None:
        self.data = _merge(self.data, values)

    # Convenience accessors -------------------------------------------------
    def pipeline_kind(self) -> str:
        return str(self.data.get("pipeline", "feature"))

    def framerate(self) -> int:
        return int(self.data.get("framerate", 10))

    def window_size_ms(self) -> int:
        return int(float(self.data.get("window_size_sec", 15)) * 1000)

    def ear_threshold(self) -> float:
        return float(self.data.get("ear_threshold", 0.21))

    def max_blink_duration_ms(self) -> int:
        return int(self.data.get("max_blink_duration_ms", 300))

    def normal_blink_rate(self) -> float:
        return float(self.data.get("normal_blink_rate", 17.0))

    def normal_ear(self) -> float:
        return float(self.data.get("normal_ear", 0.27))

    def thresholds(self) -> tuple[float, float]:
        th = self.data.get("thresholds", {}) or {}
        return float(th.get("ok", 0.4)), float(th.get("caution", 0.7))

    def break_cooldown_ms(self) -> int:
        return int(float(self.data.get("break_cooldown_sec", 120)) * 1000)

    def break_duration_sec(self) -> int:
        return int(self.data.get("break_duration_sec", 20))

    def metric_interval_ms(self) -> int:
        return int(float(self.data.get("metric_interval_sec", 15)) * 1000)

    def model_smoothing_alpha(self) -> float:
        return float(self.data.get("model_smoothing_alpha", 0.3))

    def model_path(self) -> Optional[str]:
        p = self.data.get("model_path")
        return str(p) if p else None

    def camera_index(self) -> int:
        return int(self.data.get("camera_index", 0))

    def set_camera_index(self, idx: int) -> None:
        self.data["camera_index"] = int(idx)

    def do_not_disturb(self) -> bool:
        return bool(self.data.get("do_not_disturb", False))

    def set_do_not_disturb(self, on: bool) -> None:
        self.data["do_not_disturb"] = bool(on)

    def data_retention_days(self) -> int:
        return int(self.data.get("data_retention_days", 90))

    def log_level(self) -> str:
        return str((self.data.get("logging", {}) or {}).get("level", "INFO"))

    def log_file(self) -> Optional[str]:
        f = (self.data.get("logging", {}) or {}).get("file")
        return str(f) if f else None

    def pipeline_config(self) -> "PipelineConfig":
        return PipelineConfig.from_settings(self)


@dataclass(frozen=True)
class PipelineConfig:
    pipeline: str = "feature"
    ear_threshold: float = 0.21
    max_blink_duration_ms: int = 300
    window_size_ms: int = 15000
    normal_blink_rate: float = 17.0
    normal_ear: float = 0.27
    framerate: int = 10
    ok_threshold: float = 0.4
    caution_threshold: float = 0.7
    break_cooldown_ms: int = 120000
    metric_interval_ms: int = 15000
    model_smoothing_alpha: float = 0.3
    do_not_disturb: bool = False

    @classmethod
    def from_settings(cls, settings: SettingsManager) -> "PipelineConfig":
        try:
            ok, caution = settings.thresholds()
            cfg = cls(
                pipeline=settings.pipeline_kind(),
                ear_threshold=settings.ear_threshold(),
                max_blink_duration_ms=settings.max_blink_duration_ms(),
                window_size_ms=settings.window_size_ms(),
                normal_blink_rate=settings.normal_blink_rate(),
                normal_ear=settings.normal_ear(),
                framerate=settings.framerate(),
                ok_threshold=ok,
                caution_threshold=caution,
                break_cooldown_ms=settings.break_cooldown_ms(),
                metric_interval_ms=settings.metric_interval_ms(),
                model_smoothing_alpha=settings.model_smoothing_alpha(),
                do_not_disturb=settings.do_not_disturb(),
            )
        except (TypeError, ValueError) as e:
            raise SettingsError(f"invalid setting value: {e}") from e
        cfg.validate()
        return cfg

    def validate(self) -> None:
        if self.pipeline not in PIPELINE_KINDS:
            raise SettingsError(f"pipeline must be one of {PIPELINE_KINDS}, got {self.pipeline!r}")
        if self.window_size_ms <= 0:
            raise SettingsError("window_size_sec must be positive")
        if self.framerate <= 0:
            raise SettingsError("framerate must be positive")
        if self.max_blink_duration_ms <= 0:
            raise SettingsError("max_blink_duration_ms must be positive")
        if self.normal_blink_rate <= 0 or self.normal_ear <= 0:
            raise SettingsError("normal_blink_rate and normal_ear must be positive")
        if not (0.0 <= self.ok_threshold <= self.caution_threshold <= 1.0):
            raise SettingsError("thresholds must satisfy 0 <= ok <= caution <= 1")
        if self.metric_interval_ms <= 0:
            raise SettingsError("metric_interval_sec must be positive")
        if self.break_cooldown_ms < 0:
            raise SettingsError("break_cooldown_sec must not be negative")
        if not (0.0 < self.model_smoothing_alpha <= 1.0):
            raise SettingsError("model_smoothing_alpha must be in (0, 1]")

    @property
    def frame_interval_ms(self) -> int:
        return max(1, int(round(1000.0 / self.framerate)))
