"""
Typed models for the classroom monitor.

Frames, detection samples, attendance events, status snapshots and the
typed view of the YAML configuration.
"""

from .frame import FrameData
from .sample import Region, Sample
from .attendance_event import AttendanceEvent, EventKind
from .status import EngineState, EngineStatus, describe_count
from .config import (
    Config,
    CameraConfig,
    DetectionConfig,
    HaarConfig,
    YoloConfig,
    MetricsConfig,
    AttendanceConfig,
    PipelineSettings,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Region",
    "Sample",
    # Attendance
    "AttendanceEvent",
    "EventKind",
    # Status
    "EngineState",
    "EngineStatus",
    "describe_count",
    # Config
    "Config",
    "CameraConfig",
    "DetectionConfig",
    "HaarConfig",
    "YoloConfig",
    "MetricsConfig",
    "AttendanceConfig",
    "PipelineSettings",
    "WebConfig",
]
