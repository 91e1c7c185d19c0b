"""
Pipeline module for the classroom monitor.

The pipeline orchestrates the per-tick flow:
- Frame acquisition from the camera source
- Face estimation through the detector adapter
- Rolling metrics and attendance events (via MonitorSession)
- Status snapshots for presentation
"""

from .engine import EngineConfig, MonitorEngine, create_engine_from_config
from .session import MonitorSession, SessionConfig

__all__ = [
    "EngineConfig",
    "MonitorEngine",
    "create_engine_from_config",
    "MonitorSession",
    "SessionConfig",
]
