"""
Synthetic EAR sequences, landmarks and metric records.

Lets the pipeline and the store be exercised without a webcam or a human in
front of it. Three conditions are modelled:

    normal    EAR ~0.27, ~17 blinks/min, 150 ms blinks
    strained  EAR ~0.20, ~8 blinks/min, 200 ms blinks
    mixed     linear drift from normal to strained over the sequence
"""
from __future__ import annotations

import json
import os
import sys
import time
from typing import Any, Dict, List, Optional

import numpy as np

from DeskEye.tracking.landmarks import (
    FACE_MESH_POINTS,
    LEFT_EYE_INDICES,
    RIGHT_EYE_INDICES,
    EyeLandmarkSet,
    LandmarkPoint,
)

CONDITIONS = ("normal", "strained", "mixed")

# Six-point outline in eye-width units, same order as EyeLandmarkSet
_EYE_OUTLINE = (
    (-0.5, 0.0),
    (-0.25, -0.5),
    (0.0, -0.5),
    (0.5, 0.0),
    (0.0, 0.5),
    (-0.25, 0.5),
)


class SyntheticDataGenerator:
    normal_ear = 0.27
    normal_blink_rate = 17.0
    normal_blink_duration = 150.0
    strained_ear = 0.20
    strained_blink_rate = 8.0
    strained_blink_duration = 200.0
    eye_width = 0.08

    def __init__(self, seed: Optional[int] = 42, noise: bool = True) -> None:
        self.rng = np.random.default_rng(seed)
        self.noise = bool(noise)

    def _noise(self, scale: float) -> float:
        if not self.noise:
            return 0.0
        return float(self.rng.uniform(-scale, scale))

    def _params(self, condition: str, progress: float):
        if condition not in CONDITIONS:
            raise ValueError(f"unknown condition {condition!r}")
        if condition == "normal":
            return self.normal_ear, self.normal_blink_rate, self.normal_blink_duration
        if condition == "strained":
            return self.strained_ear, self.strained_blink_rate, self.strained_blink_duration
        ear = self.normal_ear - (self.normal_ear - self.strained_ear) * progress
        rate = self.normal_blink_rate - (self.normal_blink_rate - self.strained_blink_rate) * progress
        dur = self.normal_blink_duration + (self.strained_blink_duration - self.normal_blink_duration) * progress
        return ear, rate, dur

    # EAR sequences -----------------------------------------------------
    def generate_ear_sequence(self, duration_s: float = 60, condition: str = "normal", fps: int = 10) -> List[Dict[str, Any]]:
        """One dict per frame: frame, timestamp (ms), ear, leftEAR, rightEAR, isBlink."""
        total = int(duration_s * fps)
        frames: List[Dict[str, Any]] = []
        since_blink = 0
        blink_left = 0
        for i in range(total):
            base, rate, dur = self._params(condition, i / float(total) if total else 0.0)
            interval = (60.0 / rate) * fps
            if blink_left <= 0 and since_blink >= interval:
                blink_left = max(1, int(dur / 1000.0 * fps + 0.5))
                since_blink = 0
            is_blink = blink_left > 0
            if is_blink:
                ear = base * 0.3 + self._noise(0.02)
                blink_left -= 1
            else:
                ear = base + self._noise(0.03)
                since_blink += 1
            frames.append({
                "frame": i,
                "timestamp": int(round(i * 1000.0 / fps)),
                "ear": min(0.4, max(0.1, ear)),
                "leftEAR": min(0.4, max(0.1, ear + self._noise(0.01))),
                "rightEAR": min(0.4, max(0.1, ear + self._noise(0.01))),
                "isBlink": is_blink,
            })
        return frames

    # Landmarks ---------------------------------------------------------
    def generate_eye_landmarks(self, center_x: float, center_y: float, ear: float) -> EyeLandmarkSet:
        """Six eye points whose EAR is exactly `ear`."""
        width = self.eye_width
        height = width * float(ear)
        z = float(self.rng.uniform(0.0, 0.01)) if self.noise else 0.0
        return EyeLandmarkSet(tuple(
            LandmarkPoint(center_x + dx * width, center_y + dy * height, z)
            for dx, dy in _EYE_OUTLINE
        ))

    def generate_landmarks(self, ear: float = 0.27) -> List[LandmarkPoint]:
        """A full Face Mesh sized point list with both eyes in place."""
        xy = self.rng.random((FACE_MESH_POINTS, 2))
        zs = self.rng.random(FACE_MESH_POINTS) * 0.1
        points = [LandmarkPoint(float(x), float(y), float(z)) for (x, y), z in zip(xy, zs)]
        for indices, cx in ((LEFT_EYE_INDICES, 0.3), (RIGHT_EYE_INDICES, 0.7)):
            eye = self.generate_eye_landmarks(cx, 0.3, ear)
            for idx, p in zip(indices, eye.points):
                points[idx] = p
        return points

    # Metric records ----------------------------------------------------
    def generate_metrics_dataset(
        self,
        num_records: int = 1000,
        condition: str = "mixed",
        interval_ms: int = 15000,
        now_ms: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        end = int(time.time() * 1000) if now_ms is None else int(now_ms)
        start = end - num_records * interval_ms
        rows: List[Dict[str, Any]] = []
        for i in range(num_records):
            progress = i / float(num_records)
            if condition == "normal":
                br = self.normal_blink_rate + self._noise(3)
                ear = self.normal_ear + self._noise(0.02)
                strain = 0.1 + self._noise(0.1)
            elif condition == "strained":
                br = self.strained_blink_rate + self._noise(2)
                ear = self.strained_ear + self._noise(0.02)
                strain = 0.7 + self._noise(0.15)
            elif condition == "mixed":
                ear, br, _ = self._params("mixed", progress)
                br += self._noise(2)
                ear += self._noise(0.02)
                strain = 0.1 + 0.7 * progress + self._noise(0.1)
            else:
                raise ValueError(f"unknown condition {condition!r}")
            rows.append({
                "timestamp": start + i * interval_ms,
                "blinkRate": min(25.0, max(5.0, br)),
                "avgEAR": min(0.35, max(0.15, ear)),
                "strainScore": min(1.0, max(0.0, strain)),
                "breakTaken": bool(self.rng.random() < 0.05),
            })
        return rows

    # Fixtures ----------------------------------------------------------
    @staticmethod
    def save_to_file(data: Any, output_dir: str, filename: str) -> str:
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, filename)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        return path

    def generate_test_dataset(self, output_dir: str) -> List[str]:
        written = []
        for cond, seconds in (("normal", 60), ("strained", 60), ("mixed", 120)):
            seq = self.generate_ear_sequence(seconds, cond, 10)
            written.append(self.save_to_file(seq, output_dir, f"ear_sequence_{cond}.json"))
        for cond, n in (("normal", 100), ("strained", 100), ("mixed", 500)):
            rows = self.generate_metrics_dataset(n, cond)
            written.append(self.save_to_file(rows, output_dir, f"metrics_{cond}.json"))
        samples = {
            name: [{"x": p.x, "y": p.y, "z": p.z} for p in self.generate_landmarks(ear)]
            for name, ear in (("normal", 0.27), ("strained", 0.20), ("blinking", 0.10))
        }
        written.append(self.save_to_file(samples, output_dir, "sample_landmarks.json"))
        return written


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python -m DeskEye.analysis.synthetic <output-dir>")
        raise SystemExit(2)
    for p in SyntheticDataGenerator().generate_test_dataset(sys.argv[1]):
        print(p)
