"""
Monitoring session state.

Everything that accumulates while the camera runs lives here: the rolling
count window, the tick timing, the last observed count and the attendance
log. The loop driver owns one session and hands its pieces to the
aggregator and the attendance tracker, so nothing is module-global and a
restart can choose to keep or drop history.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from analytics.attendance import DEFAULT_LOG_CAPACITY, AttendanceLog, AttendanceTracker
from analytics.metrics import DEFAULT_WINDOW_SIZE, MetricsAggregator, MetricsSnapshot, RateState, RollingWindow
from models.attendance_event import AttendanceEvent
from models.config import Config
from models.sample import Sample


@dataclass
class SessionConfig:
    """
    Attributes:
        window_size: Capacity of the rolling count window.
        log_capacity: Capacity of the attendance log.
        attendance_enabled: Whether attendance tracking starts switched on.
    """
    window_size: int = DEFAULT_WINDOW_SIZE
    log_capacity: int = DEFAULT_LOG_CAPACITY
    attendance_enabled: bool = False

    @classmethod
    def from_config(cls, config: Config) -> "SessionConfig":
        return cls(
            window_size=config.metrics.window_size,
            log_capacity=config.attendance.log_capacity,
            attendance_enabled=config.attendance.enabled,
        )


class MonitorSession:
    """Session-scoped state shared by the per-tick consumers."""

    def __init__(self, config: Optional[SessionConfig] = None):
        self.config = config or SessionConfig()
        self.window = RollingWindow(self.config.window_size)
        self.rate_state = RateState()
        self.attendance_log = AttendanceLog(self.config.log_capacity)
        self.metrics = MetricsAggregator(self.window, self.rate_state)
        self.attendance = AttendanceTracker(self.attendance_log, enabled=self.config.attendance_enabled)

    def apply(self, sample: Sample) -> Tuple[MetricsSnapshot, Optional[AttendanceEvent]]:
        """Feed one sample to both consumers."""
        snapshot = self.metrics.on_sample(sample.count, sample.observed_at)
        event = self.attendance.on_sample(sample.count, sample.observed_at)
        return snapshot, event

    def reset(self) -> None:
        """Drop accumulated history; the attendance on/off switch is kept."""
        self.metrics.reset()
        self.attendance.clear()
