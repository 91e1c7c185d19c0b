"""
Runtime support shared by the detection and pipeline layers.
"""

from .errors import (
    AcquisitionError,
    DetectionError,
    ModelLoadError,
    MonitorError,
    NotReadyError,
)
from .workers import WorkerSlot

__all__ = [
    "AcquisitionError",
    "DetectionError",
    "ModelLoadError",
    "MonitorError",
    "NotReadyError",
    "WorkerSlot",
]
