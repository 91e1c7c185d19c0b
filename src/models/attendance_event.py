"""
AttendanceEvent model for count transitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict


class EventKind(str, Enum):
    """
    Classification of a count transition.

    CHANGE is part of the taxonomy consumers match on, but the transition
    guard only fires on a strict increase or decrease, so it is never
    produced at the moment.
    """
    APPEARED = "appeared"
    DISAPPEARED = "disappeared"
    CHANGE = "change"

    @classmethod
    def classify(cls, previous: int, current: int) -> "EventKind":
        if current > previous:
            return cls.APPEARED
        if current < previous:
            return cls.DISAPPEARED
        return cls.CHANGE


@dataclass(frozen=True)
class AttendanceEvent:
    """
    A discrete record of the face count changing.

    Attributes:
        timestamp: Unix timestamp of the tick that saw the change.
        count: The new count.
        kind: appeared, disappeared or change.
    """
    timestamp: float
    count: int
    kind: EventKind

    @property
    def label(self) -> str:
        """Human-readable count, e.g. "3 students"."""
        return f"{self.count} student{'' if self.count == 1 else 's'}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "time": datetime.fromtimestamp(self.timestamp).strftime("%H:%M:%S"),
            "count": self.count,
            "kind": self.kind.value,
            "label": self.label,
        }
