"""
Estimator interface.

An estimator is the opaque face detector behind the detector adapter. It is
loaded once and then called once per tick with the current frame:
- OpenCV Haar cascade (default, no model download)
- YOLO via Ultralytics (optional, for a face-trained model)

Predictions are pixel-space corner pairs:
    [{"topLeft": [x1, y1], "bottomRight": [x2, y2]}, ...]
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

import numpy as np

Prediction = Dict[str, Any]


class Estimator(Protocol):
    def load(self) -> None:
        ...

    def estimate(self, frame: np.ndarray) -> List[Prediction]:
        ...


def corners(x1: float, y1: float, x2: float, y2: float, probability: Optional[float] = None) -> Prediction:
    """Build one prediction in the estimator output shape."""
    pred: Prediction = {"topLeft": [float(x1), float(y1)], "bottomRight": [float(x2), float(y2)]}
    if probability is not None:
        pred["probability"] = float(probability)
    return pred
