"""
Engine state and status snapshot models for the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .attendance_event import AttendanceEvent
from .sample import Region


class EngineState(str, Enum):
    """Lifecycle states of the monitoring loop."""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    RUNNING = "running"
    STOPPED = "stopped"


def describe_count(count: int) -> str:
    """Headline text shown next to the live count."""
    if count == 0:
        return "No students detected"
    if count == 1:
        return "1 student detected"
    return f"{count} students detected"


@dataclass
class EngineStatus:
    """
    Per-tick snapshot read by the presentation layer.

    Attributes:
        state: Current engine lifecycle state.
        face_count: Count from the most recent tick (0 while not running).
        instantaneous_rate: Ticks per second measured over the last interval.
        average_count: Rolling mean of recent counts, one decimal place.
        is_active: True while the camera is acquired and ticking.
        attendance_enabled: Whether attendance tracking is on.
        overlay_enabled: Whether presentation should draw detection boxes.
        attendance_log: Head-first event log, only populated when tracking is on.
        regions: Regions from the most recent tick.
        last_error: Message of the most recent error, if any.
        frames_processed: Ticks whose sample was applied.
        detection_failures: Ticks skipped because detection failed.
    """
    state: EngineState = EngineState.IDLE
    face_count: int = 0
    instantaneous_rate: int = 0
    average_count: float = 0.0
    is_active: bool = False
    attendance_enabled: bool = False
    overlay_enabled: bool = True
    attendance_log: List[AttendanceEvent] = field(default_factory=list)
    regions: List[Region] = field(default_factory=list)
    last_error: Optional[str] = None
    frames_processed: int = 0
    detection_failures: int = 0

    @property
    def count_label(self) -> str:
        return describe_count(self.face_count)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "state": self.state.value,
            "face_count": self.face_count,
            "count_label": self.count_label,
            "instantaneous_rate": self.instantaneous_rate,
            "average_count": self.average_count,
            "is_active": self.is_active,
            "attendance_enabled": self.attendance_enabled,
            "overlay_enabled": self.overlay_enabled,
            "attendance_log": [e.to_dict() for e in self.attendance_log],
            "regions": [r.to_dict() for r in self.regions],
            "last_error": self.last_error,
            "frames_processed": self.frames_processed,
            "detection_failures": self.detection_failures,
        }
