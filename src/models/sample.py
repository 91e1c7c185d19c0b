"""
Region and Sample models produced by the detector adapter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Region:
    """
    A detected face region in pixel coordinates.

    Attributes:
        x1: Left edge x coordinate.
        y1: Top edge y coordinate.
        x2: Right edge x coordinate.
        y2: Bottom edge y coordinate.
        confidence: Estimator score, if the estimator reports one.
    """
    x1: float
    y1: float
    x2: float
    y2: float
    confidence: Optional[float] = None

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def top_left(self) -> Tuple[float, float]:
        return (self.x1, self.y1)

    @property
    def bottom_right(self) -> Tuple[float, float]:
        return (self.x2, self.y2)

    def as_int_tuple(self) -> Tuple[int, int, int, int]:
        """Return as integer (x1, y1, x2, y2) tuple."""
        return (int(self.x1), int(self.y1), int(self.x2), int(self.y2))

    @classmethod
    def from_corners(
        cls,
        top_left: Sequence[float],
        bottom_right: Sequence[float],
        confidence: Optional[float] = None,
    ) -> "Region":
        """Create from [x, y] top-left and bottom-right corners."""
        return cls(
            x1=float(top_left[0]),
            y1=float(top_left[1]),
            x2=float(bottom_right[0]),
            y2=float(bottom_right[1]),
            confidence=confidence,
        )

    @classmethod
    def from_prediction(cls, prediction: Any) -> "Region":
        """
        Adapter: build a Region from one estimator prediction.

        Accepts the estimator's ``{"topLeft": [x, y], "bottomRight": [x, y]}``
        mapping (optionally with ``"probability"``), an object exposing
        ``x1/y1/x2/y2`` attributes, or a plain ``(x1, y1, x2, y2)`` sequence.
        """
        if isinstance(prediction, Mapping):
            confidence = prediction.get("probability", prediction.get("confidence"))
            if isinstance(confidence, Sequence):
                confidence = confidence[0] if confidence else None
            return cls.from_corners(
                prediction["topLeft"],
                prediction["bottomRight"],
                confidence=float(confidence) if confidence is not None else None,
            )
        if hasattr(prediction, "x1"):
            confidence = getattr(prediction, "confidence", None)
            return cls(
                x1=float(prediction.x1),
                y1=float(prediction.y1),
                x2=float(prediction.x2),
                y2=float(prediction.y2),
                confidence=float(confidence) if confidence is not None else None,
            )
        x1, y1, x2, y2 = prediction[:4]
        return cls(x1=float(x1), y1=float(y1), x2=float(x2), y2=float(y2))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "top_left": [self.x1, self.y1],
            "bottom_right": [self.x2, self.y2],
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class Sample:
    """
    The result of one tick's detection.

    Attributes:
        count: Number of regions the estimator returned.
        observed_at: Unix timestamp of the tick that produced the sample.
        regions: The regions themselves, for overlay drawing only.
    """
    count: int
    observed_at: float
    regions: Tuple[Region, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"Sample count must be non-negative, got {self.count}")

    @classmethod
    def from_regions(cls, regions: Sequence[Region], observed_at: float) -> "Sample":
        regions = tuple(regions)
        return cls(count=len(regions), observed_at=observed_at, regions=regions)
