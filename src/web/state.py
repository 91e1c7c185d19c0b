import logging
import threading
from typing import Optional

import cv2
import numpy as np

from models.status import EngineStatus
from pipeline.overlay import draw_overlays


class FrameCache:
    """
    Latest preview frame, shared between the tick loop and the web server.

    The tick loop only hands over the frame and the status it was counted
    with. Drawing and JPEG encoding happen when a client asks for the frame,
    at most once per frame, on the request's worker thread.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._frame: Optional[np.ndarray] = None
        self._status: Optional[EngineStatus] = None
        self._jpeg: Optional[bytes] = None

    def set_frame(self, frame: np.ndarray, status: Optional[EngineStatus] = None) -> None:
        with self._lock:
            self._frame = frame
            self._status = status
            self._jpeg = None

    def get_jpeg(self) -> Optional[bytes]:
        with self._lock:
            frame, status, jpeg = self._frame, self._status, self._jpeg
        if jpeg is not None or frame is None:
            return jpeg

        image = draw_overlays(frame, status) if status is not None else frame
        ok, buf = cv2.imencode(".jpg", image)
        if not ok:
            logging.warning("Failed to encode preview frame")
            return None
        jpeg = buf.tobytes()
        with self._lock:
            # A newer frame may have arrived while encoding
            if self._frame is frame:
                self._jpeg = jpeg
        return jpeg

    def clear(self):
        with self._lock:
            self._frame = None
            self._status = None
            self._jpeg = None
