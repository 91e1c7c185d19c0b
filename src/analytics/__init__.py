"""
Per-tick analytics: rolling metrics and attendance events.
"""

from .metrics import MetricsAggregator, MetricsSnapshot, RateState, RollingWindow
from .attendance import AttendanceLog, AttendanceTracker

__all__ = [
    "MetricsAggregator",
    "MetricsSnapshot",
    "RateState",
    "RollingWindow",
    "AttendanceLog",
    "AttendanceTracker",
]
