"""
Rolling count average and tick rate.

The aggregator keeps two small pieces of state, both owned by the session:
a fixed-capacity window of recent counts (sample based, not time based) and
the timestamp of the previous tick.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, List, Optional

DEFAULT_WINDOW_SIZE = 30


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero for positive values, unlike round()."""
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


class RollingWindow:
    """
    FIFO buffer of the most recent counts.

    Length never exceeds capacity; appending to a full window evicts the
    oldest entry.
    """

    def __init__(self, capacity: int = DEFAULT_WINDOW_SIZE):
        if capacity <= 0:
            raise ValueError("Window capacity must be positive")
        self._values: Deque[int] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._values.maxlen

    def append(self, value: int) -> None:
        self._values.append(value)

    def mean(self) -> float:
        if not self._values:
            raise ValueError("Mean of an empty window is undefined")
        return sum(self._values) / len(self._values)

    def clear(self) -> None:
        self._values.clear()

    def to_list(self) -> List[int]:
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[int]:
        return iter(self._values)


@dataclass
class RateState:
    """Timestamp of the previous tick, None before the first one."""
    last_tick_at: Optional[float] = None


@dataclass(frozen=True)
class MetricsSnapshot:
    """
    Metrics derived on one tick.

    Attributes:
        instantaneous_rate: Ticks per second from the last inter-tick interval.
        average_count: Mean of the rolling window, one decimal place.
        window_size: Number of samples currently in the window.
    """
    instantaneous_rate: int
    average_count: float
    window_size: int


class MetricsAggregator:
    """
    Turns one count per tick into a smoothed count and a tick rate.

    Example:
        aggregator = MetricsAggregator(RollingWindow(30), RateState())
        snapshot = aggregator.on_sample(count=2, now=time.time())
    """

    def __init__(self, window: RollingWindow, rate_state: RateState):
        self._window = window
        self._rate_state = rate_state
        self._instantaneous_rate = 0
        self._average_count = 0.0

    @property
    def window(self) -> RollingWindow:
        return self._window

    @property
    def rate_state(self) -> RateState:
        return self._rate_state

    @property
    def instantaneous_rate(self) -> int:
        return self._instantaneous_rate

    @property
    def average_count(self) -> float:
        return self._average_count

    def on_sample(self, count: int, now: float) -> MetricsSnapshot:
        """
        Record one sample.

        Args:
            count: Face count for this tick.
            now: Unix timestamp (seconds) of this tick.

        Returns:
            The metrics after applying the sample.
        """
        self._window.append(count)

        last = self._rate_state.last_tick_at
        self._rate_state.last_tick_at = now
        if last is not None:
            elapsed_ms = (now - last) * 1000.0
            # Duplicate or backwards timestamps keep the previous rate.
            if elapsed_ms > 0:
                self._instantaneous_rate = int(round_half_up(1000.0 / elapsed_ms))

        self._average_count = round_half_up(self._window.mean(), 1)
        return self.snapshot()

    def snapshot(self) -> MetricsSnapshot:
        return MetricsSnapshot(
            instantaneous_rate=self._instantaneous_rate,
            average_count=self._average_count,
            window_size=len(self._window),
        )

    def reset(self) -> None:
        """Forget all samples and timing."""
        self._window.clear()
        self._rate_state.last_tick_at = None
        self._instantaneous_rate = 0
        self._average_count = 0.0
