"""
Attendance state machine.

Derives discrete events from the per-tick face count: one event every time
the count differs from the last observed count, kept in a bounded log with
the newest entry first.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Iterator, List, Optional

from models.attendance_event import AttendanceEvent, EventKind

DEFAULT_LOG_CAPACITY = 10

# No sample has been seen yet. Transitions out of this state compare against
# a baseline of zero, so a first sample of 0 emits nothing.
UNOBSERVED: Optional[int] = None
BASELINE_COUNT = 0


class AttendanceLog:
    """Head-first, capacity-bounded sequence of attendance events."""

    def __init__(self, capacity: int = DEFAULT_LOG_CAPACITY):
        if capacity <= 0:
            raise ValueError("Log capacity must be positive")
        self._events: Deque[AttendanceEvent] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._events.maxlen

    def push(self, event: AttendanceEvent) -> None:
        """Insert at the head; the tail entry drops once capacity is exceeded."""
        self._events.appendleft(event)

    @property
    def head(self) -> Optional[AttendanceEvent]:
        return self._events[0] if self._events else None

    def clear(self) -> None:
        self._events.clear()

    def to_list(self) -> List[AttendanceEvent]:
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[AttendanceEvent]:
        return iter(self._events)


class AttendanceTracker:
    """
    Tracks the last observed count and logs transitions.

    While disabled, samples are ignored entirely: neither the log nor the
    last observed count changes.

    Example:
        tracker = AttendanceTracker(AttendanceLog(10), enabled=True)
        event = tracker.on_sample(count=2, now=time.time())
    """

    def __init__(self, log: AttendanceLog, enabled: bool = False):
        self._log = log
        self._enabled = enabled
        self._last_count: Optional[int] = UNOBSERVED

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        if enabled != self._enabled:
            logging.info(f"Attendance tracking {'enabled' if enabled else 'disabled'}")
        self._enabled = enabled

    @property
    def log(self) -> AttendanceLog:
        return self._log

    @property
    def last_count(self) -> Optional[int]:
        """Most recent count, or None if nothing has been observed."""
        return self._last_count

    @property
    def has_observation(self) -> bool:
        return self._last_count is not UNOBSERVED

    def on_sample(self, count: int, now: float) -> Optional[AttendanceEvent]:
        """
        Apply one sample.

        Returns:
            The emitted event, or None when the count did not change or
            tracking is disabled.
        """
        if not self._enabled:
            return None

        previous = self._last_count if self.has_observation else BASELINE_COUNT
        self._last_count = count
        if count == previous:
            return None

        event = AttendanceEvent(
            timestamp=now,
            count=count,
            kind=EventKind.classify(previous, count),
        )
        self._log.push(event)
        logging.info(f"Attendance event: {event.kind.value} count={count}")
        return event

    def events(self) -> List[AttendanceEvent]:
        """Return the log, newest first."""
        return self._log.to_list()

    def clear(self) -> None:
        """Drop the log and return to the unobserved state."""
        self._log.clear()
        self._last_count = UNOBSERVED
