"""
Eye Aspect Ratio (EAR) from six eyelid landmarks.

    EAR = (|p1 - p5| + |p2 - p4|) / (2 * |p0 - p3|)

Distances are 3D with z defaulting to 0, so planar and depth-aware landmark
sources give identical results for planar input. A zero-width eye is
"no reading" (None), never an exception.
"""
from __future__ import annotations

import math
from typing import Optional

from .landmarks import EyeLandmarkSet, LandmarkPoint


def distance(a: LandmarkPoint, b: LandmarkPoint) -> float:
    dx = a.x - b.x
    dy = a.y - b.y
    dz = (a.z or 0.0) - (b.z or 0.0)
    return math.sqrt(dx * dx + dy * dy + dz * dz)


def eye_aspect_ratio(eye: EyeLandmarkSet) -> Optional[float]:
    """EAR for one eye, or None when the geometry is degenerate."""
    v1 = distance(eye[1], eye[5])
    v2 = distance(eye[2], eye[4])
    h = distance(eye[0], eye[3])
    if not (math.isfinite(v1) and math.isfinite(v2) and math.isfinite(h)):
        return None
    if h <= 0.0:
        return None
    return (v1 + v2) / (2.0 * h)


def combined_ear(
    left: Optional[EyeLandmarkSet],
    right: Optional[EyeLandmarkSet],
) -> Optional[float]:
    """Average of the eyes that produced a reading; None if neither did."""
    values = []
    for eye in (left, right):
        if eye is None:
            continue
        ear = eye_aspect_ratio(eye)
        if ear is not None:
            values.append(ear)
    if not values:
        return None
    return sum(values) / float(len(values))
