"""
Frame classifier for the model-based pipeline.

A scikit-learn estimator with predict_proba over a downscaled grayscale frame
(INPUT_SIZE x INPUT_SIZE, values 0..1). Class 1 means "strained". Models are
persisted with pickle.
"""
from __future__ import annotations

import logging
import os
import pickle
from typing import Optional, Sequence

import cv2
import numpy as np
from sklearn.linear_model import LogisticRegression

from DeskEye.core.errors import ModelError

logger = logging.getLogger(__name__)

INPUT_SIZE = 24


def preprocess(image) -> np.ndarray:
    """BGR/gray frame -> flat float32 feature vector of INPUT_SIZE**2 values."""
    arr = np.asarray(image)
    if arr.ndim == 3 and arr.shape[2] == 3:
        arr = cv2.cvtColor(arr.astype(np.uint8), cv2.COLOR_BGR2GRAY)
    elif arr.ndim != 2:
        raise ValueError(f"unsupported frame shape {arr.shape}")
    small = cv2.resize(arr, (INPUT_SIZE, INPUT_SIZE), interpolation=cv2.INTER_AREA)
    return (small.astype(np.float32) / 255.0).reshape(-1)


class FrameStrainModel:
    def __init__(self, estimator=None) -> None:
        self.estimator = estimator

    @property
    def ready(self) -> bool:
        return self.estimator is not None and hasattr(self.estimator, "predict_proba")

    @classmethod
    def load(cls, path: str) -> "FrameStrainModel":
        if not os.path.exists(path):
            raise ModelError(f"model file not found: {path}")
        try:
            with open(path, "rb") as f:
                est = pickle.load(f)
        except Exception as e:
            raise ModelError(f"could not load model {path}: {e}") from e
        if not hasattr(est, "predict_proba"):
            raise ModelError(f"{path} does not hold a probabilistic classifier")
        logger.info("Loaded strain model from %s", path)
        return cls(est)

    def save(self, path: str) -> None:
        if self.estimator is None:
            raise ModelError("nothing to save: model is not trained")
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(path, "wb") as f:
            pickle.dump(self.estimator, f)

    def fit(self, images: Sequence, labels: Sequence[int]) -> "FrameStrainModel":
        X = np.stack([preprocess(img) for img in images])
        y = np.asarray(labels, dtype=int)
        est = LogisticRegression(max_iter=500)
        est.fit(X, y)
        self.estimator = est
        return self

    def predict(self, image) -> Optional[float]:
        """Strain probability for one frame, or None if no prediction is possible."""
        if not self.ready or image is None:
            return None
        x = preprocess(image)[None, :]
        proba = self.estimator.predict_proba(x)[0]
        classes = list(getattr(self.estimator, "classes_", [0, 1]))
        if 1 in classes:
            return float(proba[classes.index(1)])
        return float(proba[-1])
