"""
OpenCV capture source.

A classroom webcam is normally a local device index (0 for the built-in
camera). A string device_id opens a stream URL or a recorded video file,
which is handy for replaying a lecture without a camera attached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

import cv2

from models.config import CameraConfig
from models.frame import FrameData
from .base import ObservationSource, ObservationConfig


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Configuration for OpenCV-based observation sources.
    
    Attributes:
        device_id: Camera index (int), stream URL (str), or file path (str).
        buffer_size: OpenCV capture buffer size (keeps live frames fresh).
        flip_horizontal: Mirror frames, as a front-facing webcam preview does.
    """
    device_id: Union[int, str] = 0
    buffer_size: int = 1
    flip_horizontal: bool = False

    @classmethod
    def from_camera_config(cls, camera: CameraConfig, source_id: str = "camera") -> "OpenCVSourceConfig":
        """
        Adapter: Create OpenCVSourceConfig from the typed camera section.

        Args:
            camera: The `camera` section of the application config.
            source_id: Identifier for this source.
        """
        return cls(
            source_id=source_id,
            resolution=camera.resolution,
            fps=camera.fps,
            device_id=camera.device_id,
            buffer_size=camera.buffer_size,
            flip_horizontal=camera.flip_horizontal,
        )


class OpenCVSource(ObservationSource):
    """
    Camera source backed by cv2.VideoCapture.

    Acquisition is attempted once per open(); a camera that cannot be opened
    raises RuntimeError and the caller decides whether to try again.
    
    Example:
        config = OpenCVSourceConfig(device_id=0, resolution=(640, 480))
        with OpenCVSource(config) as source:
            frame_data = source.read()
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def device_id(self) -> Union[int, str]:
        return self._opencv_config.device_id

    def open(self) -> None:
        """Acquire the capture device."""
        if self._is_open:
            return

        cap = cv2.VideoCapture(self.device_id)
        if not cap.isOpened():
            cap.release()
            raise RuntimeError(f"Could not access camera {self.device_id!r}")

        # Properties only apply to local devices, not streams/files
        if isinstance(self.device_id, int) and self._opencv_config.resolution:
            w, h = self._opencv_config.resolution
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
            if self._opencv_config.fps:
                cap.set(cv2.CAP_PROP_FPS, self._opencv_config.fps)
            cap.set(cv2.CAP_PROP_BUFFERSIZE, self._opencv_config.buffer_size)

            actual_w = cap.get(cv2.CAP_PROP_FRAME_WIDTH)
            actual_h = cap.get(cv2.CAP_PROP_FRAME_HEIGHT)
            logging.info(f"Camera actual resolution: {actual_w}x{actual_h}")

        self._cap = cap
        self._is_open = True
        self._frame_index = 0
        logging.info(f"OpenCVSource opened: source_id={self.source_id}, device={self.device_id!r}")

    def read(self) -> Optional[FrameData]:
        """Read the current frame."""
        if not self._is_open or self._cap is None:
            return None

        ret, frame = self._cap.read()
        if not ret or frame is None:
            return None

        if self._opencv_config.flip_horizontal:
            frame = cv2.flip(frame, 1)

        self._frame_index += 1
        return FrameData.capture(
            frame,
            frame_index=self._frame_index,
            source_id=self.source_id,
            mirrored=self._opencv_config.flip_horizontal,
        )

    def close(self) -> None:
        """Release the capture device."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        if self._is_open:
            logging.info(f"OpenCVSource closed: source_id={self.source_id}")
        self._is_open = False


def create_source_from_config(camera: CameraConfig, source_id: str = "camera") -> ObservationSource:
    """Create the observation source selected by `camera.backend`."""
    if camera.backend != "opencv":
        raise ValueError(f"Unsupported camera backend: {camera.backend}")
    return OpenCVSource(OpenCVSourceConfig.from_camera_config(camera, source_id=source_id))
