"""
Classroom Monitor - Detection Module

Face estimators and the adapter that turns their output into per-tick samples.
"""

from __future__ import annotations

from models.config import DetectionConfig
from .adapter import DetectorAdapter
from .base import Estimator
from .haar_estimator import HaarEstimatorConfig, HaarFaceEstimator
from .yolo_estimator import YoloEstimator, YoloEstimatorConfig


def create_estimator_from_config(detection: DetectionConfig) -> Estimator:
    """
    Build the estimator selected by `detection.backend`.

    The estimator is returned unloaded; DetectorAdapter.load() loads it.
    """
    if detection.backend == "yolo":
        if detection.yolo is None or not detection.yolo.model:
            raise ValueError("detection.yolo.model is required for the yolo backend")
        return YoloEstimator(
            YoloEstimatorConfig(
                model=detection.yolo.model,
                conf_threshold=detection.yolo.conf_threshold,
                classes=detection.yolo.classes,
            )
        )
    if detection.backend == "haar":
        haar = detection.haar
        return HaarFaceEstimator(
            HaarEstimatorConfig(
                cascade=haar.cascade,
                scale_factor=haar.scale_factor,
                min_neighbors=haar.min_neighbors,
                min_size=haar.min_size,
            )
        )
    raise ValueError(f"Unknown detection backend: {detection.backend}")


__all__ = [
    "DetectorAdapter",
    "Estimator",
    "HaarEstimatorConfig",
    "HaarFaceEstimator",
    "YoloEstimator",
    "YoloEstimatorConfig",
    "create_estimator_from_config",
]
