"""
Camera source interface.

The monitoring loop only needs three things from a camera: acquire it when
monitoring starts, hand over the current frame once per tick, and release
it when monitoring stops. Concrete sources (OpenCV capture today) implement
this interface so the loop driver never touches device APIs directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

from models.frame import FrameData


@dataclass
class ObservationConfig:
    """
    Settings shared by every camera source.

    Attributes:
        source_id: Name used in logs and on each FrameData.
        resolution: Requested (width, height), or None for the device default.
        fps: Requested frame rate, or None for the device default.
    """
    source_id: str = "camera"
    resolution: Optional[Tuple[int, int]] = None
    fps: Optional[int] = None


class ObservationSource(ABC):
    """
    A camera that can be acquired and released any number of times.

    open() either acquires the device or raises; read() never raises and
    returns None when no frame is available; close() is idempotent. The
    frame index restarts from zero on every open().
    """

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False
        self._frame_index = 0

    @property
    def source_id(self) -> str:
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def frame_index(self) -> int:
        """Frames returned since the last open()."""
        return self._frame_index

    @abstractmethod
    def open(self) -> None:
        """
        Acquire the camera.

        Raises:
            RuntimeError: The device is missing, busy or access was denied.
        """

    @abstractmethod
    def read(self) -> Optional[FrameData]:
        """Return the current frame, or None if the device has nothing."""

    @abstractmethod
    def close(self) -> None:
        """Release the camera."""

    def __enter__(self) -> "ObservationSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
