"""
Error taxonomy for the monitoring loop.

None of these are retried internally; recovery is always an explicit
start/stop from the caller.
"""

from __future__ import annotations


class MonitorError(Exception):
    """Base class for classroom monitor errors."""


class ModelLoadError(MonitorError):
    """The estimator could not be loaded. The engine returns to idle."""


class NotReadyError(MonitorError):
    """Start was requested before the estimator finished loading."""


class AcquisitionError(MonitorError):
    """The camera could not be acquired (missing, busy or denied)."""


class DetectionError(MonitorError):
    """
    The estimator failed on a single frame.

    Non-fatal: the tick is skipped and no session state changes.
    """
