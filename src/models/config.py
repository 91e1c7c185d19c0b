"""
Typed configuration models matching the YAML config structure.

main.py validates the merged YAML dict and converts it once with
Config.from_dict(); the factories that build the camera, the estimator,
the session and the engine read these sections instead of raw dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


def _section(d: Dict[str, Any], key: str) -> Dict[str, Any]:
    return d.get(key, {}) or {}


@dataclass
class CameraConfig:
    """Camera configuration."""
    backend: str = "opencv"
    device_id: Union[int, str] = 0
    resolution: Optional[Tuple[int, int]] = (640, 480)
    fps: Optional[int] = 30
    buffer_size: int = 1
    flip_horizontal: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        resolution = d.get("resolution", (640, 480))
        fps = d.get("fps", 30)
        return cls(
            backend=d.get("backend", "opencv"),
            device_id=d.get("device_id", 0),
            resolution=(int(resolution[0]), int(resolution[1])) if resolution else None,
            fps=int(fps) if fps else None,
            buffer_size=int(d.get("buffer_size", 1)),
            flip_horizontal=bool(d.get("flip_horizontal", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "device_id": self.device_id,
            "resolution": list(self.resolution) if self.resolution else None,
            "fps": self.fps,
            "buffer_size": self.buffer_size,
            "flip_horizontal": self.flip_horizontal,
        }


@dataclass
class HaarConfig:
    """OpenCV Haar cascade face estimator configuration."""
    cascade: str = "haarcascade_frontalface_default.xml"
    scale_factor: float = 1.1
    min_neighbors: int = 5
    min_size: Tuple[int, int] = (60, 60)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "HaarConfig":
        min_size = d.get("min_size", (60, 60))
        return cls(
            cascade=d.get("cascade", "haarcascade_frontalface_default.xml"),
            scale_factor=float(d.get("scale_factor", 1.1)),
            min_neighbors=int(d.get("min_neighbors", 5)),
            min_size=(int(min_size[0]), int(min_size[1])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cascade": self.cascade,
            "scale_factor": self.scale_factor,
            "min_neighbors": self.min_neighbors,
            "min_size": list(self.min_size),
        }


@dataclass
class YoloConfig:
    """YOLO estimator configuration."""
    model: str = ""
    conf_threshold: float = 0.25
    classes: Optional[List[int]] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "YoloConfig":
        return cls(
            model=d.get("model", ""),
            conf_threshold=float(d.get("conf_threshold", 0.25)),
            classes=d.get("classes"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "model": self.model,
            "conf_threshold": self.conf_threshold,
        }
        if self.classes is not None:
            d["classes"] = self.classes
        return d


@dataclass
class DetectionConfig:
    """Detection configuration; `yolo` is only present when configured."""
    backend: str = "haar"
    haar: HaarConfig = field(default_factory=HaarConfig)
    yolo: Optional[YoloConfig] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        yolo_dict = d.get("yolo")
        return cls(
            backend=d.get("backend", "haar"),
            haar=HaarConfig.from_dict(_section(d, "haar")),
            yolo=YoloConfig.from_dict(yolo_dict) if yolo_dict else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "backend": self.backend,
            "haar": self.haar.to_dict(),
        }
        if self.yolo:
            d["yolo"] = self.yolo.to_dict()
        return d


@dataclass
class MetricsConfig:
    """Rolling metrics configuration."""
    window_size: int = 30

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MetricsConfig":
        return cls(window_size=int(d.get("window_size", 30)))

    def to_dict(self) -> Dict[str, Any]:
        return {"window_size": self.window_size}


@dataclass
class AttendanceConfig:
    """Attendance tracking configuration."""
    enabled: bool = False
    log_capacity: int = 10

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AttendanceConfig":
        return cls(
            enabled=bool(d.get("enabled", False)),
            log_capacity=int(d.get("log_capacity", 10)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "log_capacity": self.log_capacity,
        }


@dataclass
class PipelineSettings:
    """Loop driver configuration."""
    tick_interval: float = 0.0
    reset_on_restart: bool = False
    overlay: bool = True
    autostart: bool = False
    stats_log_interval: float = 60.0
    max_consecutive_failures: int = 30

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PipelineSettings":
        return cls(
            tick_interval=float(d.get("tick_interval", 0.0)),
            reset_on_restart=bool(d.get("reset_on_restart", False)),
            overlay=bool(d.get("overlay", True)),
            autostart=bool(d.get("autostart", False)),
            stats_log_interval=float(d.get("stats_log_interval", 60.0)),
            max_consecutive_failures=int(d.get("max_consecutive_failures", 30)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick_interval": self.tick_interval,
            "reset_on_restart": self.reset_on_restart,
            "overlay": self.overlay,
            "autostart": self.autostart,
            "stats_log_interval": self.stats_log_interval,
            "max_consecutive_failures": self.max_consecutive_failures,
        }


@dataclass
class WebConfig:
    """REST API configuration."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=bool(d.get("enabled", True)),
            host=d.get("host", "0.0.0.0"),
            port=int(d.get("port", 5000)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    attendance: AttendanceConfig = field(default_factory=AttendanceConfig)
    pipeline: PipelineSettings = field(default_factory=PipelineSettings)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/classroom_monitor.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from the merged dictionary load_config returns."""
        return cls(
            camera=CameraConfig.from_dict(_section(d, "camera")),
            detection=DetectionConfig.from_dict(_section(d, "detection")),
            metrics=MetricsConfig.from_dict(_section(d, "metrics")),
            attendance=AttendanceConfig.from_dict(_section(d, "attendance")),
            pipeline=PipelineSettings.from_dict(_section(d, "pipeline")),
            web=WebConfig.from_dict(_section(d, "web")),
            log_path=d.get("log_path", "logs/classroom_monitor.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary."""
        return {
            "camera": self.camera.to_dict(),
            "detection": self.detection.to_dict(),
            "metrics": self.metrics.to_dict(),
            "attendance": self.attendance.to_dict(),
            "pipeline": self.pipeline.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
