from __future__ import annotations

"""
Webcam wrapper.

Opens a camera by index, hands out BGR frames on request and releases the
device cleanly. Pacing is left to the caller's tick loop.
"""
import logging
from typing import Optional, Tuple

import cv2

logger = logging.getLogger(__name__)


class Camera:
    def __init__(self, index: int = 0, width: int = 640, height: int = 480, target_fps: int = 10) -> None:
        self.index = int(index)
        self.width = int(width)
        self.height = int(height)
        self.target_fps = max(1, int(target_fps))
        self.cap = None

    def start(self) -> bool:
        cap = cv2.VideoCapture(self.index)
        if not cap or not cap.isOpened():
            logger.error("Could not open camera %d", self.index)
            return False
        # Resolution and FPS are hints; drivers may ignore them
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        cap.set(cv2.CAP_PROP_FPS, float(self.target_fps))
        self.cap = cap
        logger.info("Camera %d opened", self.index)
        return True

    def read(self) -> Tuple[bool, Optional[object]]:
        if self.cap is None:
            return False, None
        ok, frame = self.cap.read()
        if not ok:
            return False, None
        return True, frame

    def stop(self) -> None:
        if self.cap is not None:
            try:
                self.cap.release()
            finally:
                self.cap = None

    @property
    def is_open(self) -> bool:
        return bool(self.cap is not None and self.cap.isOpened())
