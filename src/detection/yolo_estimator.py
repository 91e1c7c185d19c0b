"""
YOLO estimator (optional).

Uses Ultralytics if installed. Point `detection.yolo.model` at a face-trained
checkpoint; for a stock COCO model set `classes: [0]` to count people instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .base import Prediction, corners


@dataclass(frozen=True)
class YoloEstimatorConfig:
    model: str
    conf_threshold: float = 0.25
    classes: Optional[Sequence[int]] = None


class YoloEstimator:
    def __init__(self, cfg: YoloEstimatorConfig):
        self.cfg = cfg
        self._model = None

    def load(self) -> None:
        try:
            from ultralytics import YOLO  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "Ultralytics is not installed. Install with `pip install ultralytics` "
                "or switch detection.backend to 'haar'."
            ) from e

        self._model = YOLO(self.cfg.model)

    def estimate(self, frame: np.ndarray) -> List[Prediction]:
        if self._model is None:
            raise RuntimeError("Estimator used before load()")

        results = self._model.predict(
            source=frame,
            conf=self.cfg.conf_threshold,
            classes=list(self.cfg.classes) if self.cfg.classes is not None else None,
            verbose=False,
        )
        if not results:
            return []

        boxes = getattr(results[0], "boxes", None)
        if boxes is None:
            return []

        xyxy = boxes.xyxy.cpu().numpy() if hasattr(boxes.xyxy, "cpu") else np.asarray(boxes.xyxy)
        conf = boxes.conf.cpu().numpy() if hasattr(boxes.conf, "cpu") else np.asarray(boxes.conf)

        return [corners(x1, y1, x2, y2, probability=c) for (x1, y1, x2, y2), c in zip(xyxy, conf)]
