"""
Landmark value types handed over by the face-mesh detector.

Coordinates are normalized image space (0..1). Each eye is reduced to six
points in a fixed anatomical order:

    0 outer corner, 1 upper-outer, 2 upper-inner,
    3 inner corner, 4 lower-inner, 5 lower-outer
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

# MediaPipe Face Mesh indices (468-point topology), ordered as above
LEFT_EYE_INDICES: Tuple[int, ...] = (33, 160, 158, 133, 153, 144)
RIGHT_EYE_INDICES: Tuple[int, ...] = (362, 385, 387, 263, 373, 380)
FACE_MESH_POINTS = 468


@dataclass(frozen=True)
class LandmarkPoint:
    x: float
    y: float
    z: float = 0.0

    @classmethod
    def from_any(cls, p: Any) -> "LandmarkPoint":
        """Build from a MediaPipe landmark, a mapping or an (x, y[, z]) tuple."""
        if isinstance(p, LandmarkPoint):
            return p
        if isinstance(p, dict):
            return cls(float(p["x"]), float(p["y"]), float(p.get("z") or 0.0))
        if hasattr(p, "x") and hasattr(p, "y"):
            return cls(float(p.x), float(p.y), float(getattr(p, "z", 0.0) or 0.0))
        seq = tuple(p)
        z = float(seq[2]) if len(seq) > 2 else 0.0
        return cls(float(seq[0]), float(seq[1]), z)


@dataclass(frozen=True)
class EyeLandmarkSet:
    points: Tuple[LandmarkPoint, ...]

    def __post_init__(self) -> None:
        if len(self.points) != 6:
            raise ValueError(f"an eye needs exactly 6 landmarks, got {len(self.points)}")

    @classmethod
    def from_points(cls, points: Sequence[Any]) -> "EyeLandmarkSet":
        return cls(tuple(LandmarkPoint.from_any(p) for p in points))

    @classmethod
    def from_mesh(cls, landmarks: Sequence[Any], indices: Sequence[int]) -> "EyeLandmarkSet":
        return cls(tuple(LandmarkPoint.from_any(landmarks[i]) for i in indices))

    def __getitem__(self, i: int) -> LandmarkPoint:
        return self.points[i]

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class FrameObservation:
    """Detector output for one processed frame."""

    timestamp_ms: int
    left: Optional[EyeLandmarkSet] = None
    right: Optional[EyeLandmarkSet] = None
    image: Optional[Any] = None

    @property
    def has_eyes(self) -> bool:
        return self.left is not None or self.right is not None
