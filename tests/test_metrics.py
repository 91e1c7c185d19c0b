"""
Tests for the rolling window and metrics aggregator.
"""

import pytest

from analytics.metrics import (
    DEFAULT_WINDOW_SIZE,
    MetricsAggregator,
    RateState,
    RollingWindow,
    round_half_up,
)


def make_aggregator(capacity: int = DEFAULT_WINDOW_SIZE) -> MetricsAggregator:
    return MetricsAggregator(RollingWindow(capacity), RateState())


class TestRoundHalfUp:
    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3.0
        assert round_half_up(0.25, 1) == 0.3

    def test_non_halves(self):
        assert round_half_up(1.1333, 1) == 1.1
        assert round_half_up(9.6) == 10.0


class TestRollingWindow:
    def test_bounded_length(self):
        window = RollingWindow(3)
        for v in range(10):
            window.append(v)
        assert len(window) == 3
        assert window.to_list() == [7, 8, 9]

    def test_mean(self):
        window = RollingWindow(5)
        for v in (1, 2, 3):
            window.append(v)
        assert window.mean() == 2.0

    def test_empty_mean_raises(self):
        with pytest.raises(ValueError):
            RollingWindow(5).mean()

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            RollingWindow(0)

    def test_clear(self):
        window = RollingWindow(5)
        window.append(4)
        window.clear()
        assert len(window) == 0


class TestMetricsAggregator:
    def test_constant_counts(self):
        agg = make_aggregator()
        for i in range(3):
            snapshot = agg.on_sample(2, now=100.0 + i)
        assert snapshot.average_count == 2.0
        assert snapshot.window_size == 3

    def test_mixed_counts(self):
        agg = make_aggregator()
        for i, count in enumerate([1, 2, 3]):
            snapshot = agg.on_sample(count, now=100.0 + i)
        assert snapshot.average_count == 2.0

    def test_window_evicts_oldest(self):
        """Thirty ones then a five: the first one is evicted, mean 34/30."""
        agg = make_aggregator()
        for i in range(30):
            agg.on_sample(1, now=100.0 + i)
        snapshot = agg.on_sample(5, now=200.0)
        assert snapshot.window_size == 30
        assert snapshot.average_count == 1.1

    def test_first_sample_has_no_rate(self):
        agg = make_aggregator()
        snapshot = agg.on_sample(1, now=100.0)
        assert snapshot.instantaneous_rate == 0
        assert agg.rate_state.last_tick_at == 100.0

    def test_rate_from_interval(self):
        agg = make_aggregator()
        agg.on_sample(1, now=100.0)
        snapshot = agg.on_sample(1, now=100.25)
        assert snapshot.instantaneous_rate == 4

    def test_zero_interval_keeps_previous_rate(self):
        agg = make_aggregator()
        agg.on_sample(1, now=100.0)
        agg.on_sample(1, now=100.5)
        snapshot = agg.on_sample(3, now=100.5)
        assert snapshot.instantaneous_rate == 2
        # The sample still counts towards the average
        assert snapshot.window_size == 3
        assert snapshot.average_count == round_half_up(5 / 3, 1)

    def test_backwards_clock_keeps_previous_rate(self):
        agg = make_aggregator()
        agg.on_sample(1, now=100.0)
        agg.on_sample(1, now=101.0)
        snapshot = agg.on_sample(1, now=99.0)
        assert snapshot.instantaneous_rate == 1

    def test_reset(self):
        agg = make_aggregator()
        agg.on_sample(2, now=100.0)
        agg.on_sample(2, now=101.0)
        agg.reset()
        assert agg.average_count == 0.0
        assert agg.instantaneous_rate == 0
        assert agg.rate_state.last_tick_at is None
        assert len(agg.window) == 0

    def test_small_window(self):
        agg = make_aggregator(capacity=2)
        for i, count in enumerate([10, 0, 0]):
            snapshot = agg.on_sample(count, now=100.0 + i)
        assert snapshot.average_count == 0.0
