"""
Overlay drawing for the local preview window.
"""

from __future__ import annotations

from typing import Sequence

import cv2
import numpy as np

from models.sample import Region
from models.status import EngineStatus

# Colors (BGR)
COLOR_BOX = (212, 182, 6)  # Cyan
COLOR_TEXT = (255, 255, 255)
CORNER_SIZE = 20


def draw_regions(frame: np.ndarray, regions: Sequence[Region]) -> np.ndarray:
    """Draw each face box with heavier corner accents."""
    for region in regions:
        x1, y1, x2, y2 = region.as_int_tuple()
        cv2.rectangle(frame, (x1, y1), (x2, y2), COLOR_BOX, 2)

        c = CORNER_SIZE
        corners = (
            [(x1, y1 + c), (x1, y1), (x1 + c, y1)],  # top-left
            [(x2 - c, y1), (x2, y1), (x2, y1 + c)],  # top-right
            [(x1, y2 - c), (x1, y2), (x1 + c, y2)],  # bottom-left
            [(x2 - c, y2), (x2, y2), (x2, y2 - c)],  # bottom-right
        )
        for points in corners:
            cv2.polylines(frame, [np.array(points, dtype=np.int32)], False, COLOR_BOX, 4)
    return frame


def draw_status(frame: np.ndarray, status: EngineStatus) -> np.ndarray:
    """Draw the count headline and live stats in the top-left corner."""
    lines = [
        status.count_label,
        f"FPS: {status.instantaneous_rate}  Avg: {status.average_count}",
    ]
    if status.attendance_enabled and status.attendance_log:
        head = status.attendance_log[0]
        lines.append(f"Last: {head.kind.value} ({head.label})")

    font = cv2.FONT_HERSHEY_SIMPLEX
    for i, text in enumerate(lines):
        y = 30 + i * 28
        cv2.putText(frame, text, (10, y), font, 0.7, (0, 0, 0), 4)
        cv2.putText(frame, text, (10, y), font, 0.7, COLOR_TEXT, 2)
    return frame


def draw_overlays(frame: np.ndarray, status: EngineStatus) -> np.ndarray:
    """Annotate a copy of the frame for display."""
    annotated = frame.copy()
    if status.overlay_enabled:
        draw_regions(annotated, status.regions)
    return draw_status(annotated, status)
