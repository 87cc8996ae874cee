"""Bounded trend buffers for graphable metrics."""

from collections import deque
from collections.abc import Iterator

DEFAULT_CAPACITY = 200


def append_sample(series: deque[float], value: float, capacity: int) -> None:
    """Push value to the back of series, dropping the oldest entries past capacity."""
    series.append(value)
    while len(series) > capacity:
        series.popleft()


class HistorySeries:
    """
    Fixed-capacity, insertion-ordered sequence of samples for one metric.

    Eviction is strictly oldest-first. Appending is the only mutation; a
    smaller capacity trims the oldest entries immediately.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._values: deque[float] = deque()
        self._capacity = max(1, capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @capacity.setter
    def capacity(self, value: int) -> None:
        self._capacity = max(1, value)
        while len(self._values) > self._capacity:
            self._values.popleft()

    @property
    def latest(self) -> float | None:
        """Most recent value, or None when empty."""
        return self._values[-1] if self._values else None

    def append(self, value: float) -> None:
        append_sample(self._values, value, self._capacity)

    def values(self) -> tuple[float, ...]:
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)
