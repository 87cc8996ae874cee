"""Tests for the bounded history buffers."""

from collections import deque

import pytest

from pymon.history import DEFAULT_CAPACITY, HistorySeries, append_sample


@pytest.mark.parametrize("capacity,count", [(1, 5), (3, 10), (200, 250)])
def test_overflow_keeps_last_values_in_order(capacity, count):
    """Test a full series holds exactly the newest capacity values."""
    series = HistorySeries(capacity)
    for value in range(count):
        series.append(float(value))

    assert len(series) == capacity
    assert series.values() == tuple(float(v) for v in range(count - capacity, count))


def test_under_capacity_keeps_everything():
    """Test nothing is evicted before the series is full."""
    series = HistorySeries(5)
    for value in (3.0, 1.0, 2.0):
        series.append(value)
    assert series.values() == (3.0, 1.0, 2.0)


def test_eviction_is_not_value_based():
    """Test the oldest value goes first even when it is the largest."""
    series = HistorySeries(2)
    series.append(99.0)
    series.append(1.0)
    series.append(2.0)
    assert series.values() == (1.0, 2.0)


def test_default_capacity():
    """Test the default capacity."""
    assert HistorySeries().capacity == DEFAULT_CAPACITY == 200


def test_shrinking_capacity_trims_oldest():
    """Test reducing capacity drops the oldest entries."""
    series = HistorySeries(5)
    for value in range(5):
        series.append(float(value))
    series.capacity = 2
    assert series.values() == (3.0, 4.0)


def test_latest():
    """Test latest returns the newest value or None."""
    series = HistorySeries(3)
    assert series.latest is None
    series.append(1.5)
    series.append(2.5)
    assert series.latest == 2.5
    assert list(series) == [1.5, 2.5]


def test_append_sample_on_plain_deque():
    """Test the free function bounds any deque."""
    data: deque[float] = deque()
    for value in range(10):
        append_sample(data, float(value), 4)
    assert list(data) == [6.0, 7.0, 8.0, 9.0]
