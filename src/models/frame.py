"""
Camera frame handed from the observation source to the detector.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass
class FrameData:
    """
    One camera frame for one tick.

    The pixel buffer belongs to the tick that read it. Samples derived from
    it keep region coordinates only, so the buffer can be dropped as soon as
    the overlay has been drawn.

    Attributes:
        frame: BGR pixel data, shape (height, width, 3).
        captured_at: Unix timestamp when the source returned the frame.
        frame_index: 1-based position since the source was last opened.
        source_id: Identifier of the camera that produced the frame.
        mirrored: True if the source flipped the frame horizontally.
    """
    frame: np.ndarray
    captured_at: float
    frame_index: int = 0
    source_id: Optional[str] = None
    mirrored: bool = False

    @classmethod
    def capture(
        cls,
        frame: np.ndarray,
        frame_index: int,
        source_id: Optional[str] = None,
        mirrored: bool = False,
    ) -> "FrameData":
        """Wrap a freshly read buffer, stamped with the current time."""
        return cls(
            frame=frame,
            captured_at=time.time(),
            frame_index=frame_index,
            source_id=source_id,
            mirrored=mirrored,
        )

    @property
    def width(self) -> int:
        return int(self.frame.shape[1])

    @property
    def height(self) -> int:
        return int(self.frame.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)
