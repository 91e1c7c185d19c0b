"""
OpenCV Haar cascade face estimator.

Ships with opencv-python (cv2.data.haarcascades), so it works on any dev
machine without downloading a model.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .base import Prediction, corners


@dataclass(frozen=True)
class HaarEstimatorConfig:
    cascade: str = "haarcascade_frontalface_default.xml"
    scale_factor: float = 1.1
    min_neighbors: int = 5
    min_size: Tuple[int, int] = field(default=(60, 60))


class HaarFaceEstimator:
    def __init__(self, cfg: HaarEstimatorConfig):
        self.cfg = cfg
        self._cascade: Optional[cv2.CascadeClassifier] = None

    @property
    def cascade_path(self) -> str:
        if os.path.isabs(self.cfg.cascade) or os.path.exists(self.cfg.cascade):
            return self.cfg.cascade
        return os.path.join(cv2.data.haarcascades, self.cfg.cascade)

    def load(self) -> None:
        cascade = cv2.CascadeClassifier(self.cascade_path)
        if cascade.empty():
            raise RuntimeError(f"Failed to load Haar cascade: {self.cascade_path}")
        self._cascade = cascade
        logging.info(f"Haar face cascade loaded: {self.cascade_path}")

    def estimate(self, frame: np.ndarray) -> List[Prediction]:
        if self._cascade is None:
            raise RuntimeError("Estimator used before load()")

        gray = frame if frame.ndim == 2 else cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        gray = cv2.equalizeHist(gray)
        faces = self._cascade.detectMultiScale(
            gray,
            scaleFactor=self.cfg.scale_factor,
            minNeighbors=self.cfg.min_neighbors,
            minSize=tuple(self.cfg.min_size),
        )
        return [corners(x, y, x + w, y + h) for (x, y, w, h) in faces]
