from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class RegionModel(BaseModel):
    top_left: List[float]
    bottom_right: List[float]
    confidence: Optional[float] = None


class AttendanceEventModel(BaseModel):
    timestamp: float
    time: str = Field(..., description="Local wall-clock time, HH:MM:SS")
    count: int
    kind: str = Field(..., description="appeared|disappeared|change")
    label: str


class StatusResponse(BaseModel):
    """
    Per-tick snapshot for the dashboard.
    The attendance log is only populated while attendance tracking is on.
    """
    state: str = Field(..., description="idle|loading|ready|running|stopped")
    face_count: int
    count_label: str
    instantaneous_rate: int = Field(..., description="Detection ticks per second")
    average_count: float = Field(..., description="Rolling mean of recent counts")
    is_active: bool
    attendance_enabled: bool
    overlay_enabled: bool
    attendance_log: List[AttendanceEventModel] = Field(default_factory=list)
    regions: List[RegionModel] = Field(default_factory=list)
    last_error: Optional[str] = None
    frames_processed: int = 0
    detection_failures: int = 0


class AttendanceLogResponse(BaseModel):
    enabled: bool
    events: List[AttendanceEventModel]


class ToggleRequest(BaseModel):
    enabled: bool
