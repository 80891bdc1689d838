"""
MediaPipe Face Mesh adapter.

Turns a BGR camera frame into a FrameObservation carrying the six EAR
landmarks per eye. Frames without a face give None.
"""
from __future__ import annotations

import logging
from typing import Optional

import cv2
import mediapipe as mp

from .landmarks import (
    LEFT_EYE_INDICES,
    RIGHT_EYE_INDICES,
    EyeLandmarkSet,
    FrameObservation,
)

logger = logging.getLogger(__name__)


class FaceMeshLandmarker:
    def __init__(
        self,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        keep_image: bool = False,
    ) -> None:
        self.keep_image = bool(keep_image)
        self._mesh = mp.solutions.face_mesh.FaceMesh(
            max_num_faces=1,
            refine_landmarks=True,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    def close(self) -> None:
        if self._mesh is not None:
            self._mesh.close()
        self._mesh = None

    def detect(self, frame, timestamp_ms: int) -> Optional[FrameObservation]:
        """Landmarks for the first face in a BGR frame, or None."""
        if self._mesh is None or frame is None:
            return None
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        res = self._mesh.process(rgb)
        if not res or not res.multi_face_landmarks:
            return None
        pts = res.multi_face_landmarks[0].landmark
        if len(pts) <= max(max(LEFT_EYE_INDICES), max(RIGHT_EYE_INDICES)):
            logger.debug("Face mesh returned %d points, skipping frame", len(pts))
            return None
        return FrameObservation(
            timestamp_ms=int(timestamp_ms),
            left=EyeLandmarkSet.from_mesh(pts, LEFT_EYE_INDICES),
            right=EyeLandmarkSet.from_mesh(pts, RIGHT_EYE_INDICES),
            image=frame if self.keep_image else None,
        )
