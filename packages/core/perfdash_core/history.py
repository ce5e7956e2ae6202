"""Bounded rolling windows keyed by series name."""

from __future__ import annotations

from collections import deque

DEFAULT_CAPACITY = 60


class HistoryBuffer:
    """One FIFO window per series key, each holding at most ``capacity`` values.

    Series are created on first push and never removed; a key that stops being
    observed keeps its last window.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._series: dict[str, deque[float]] = {}

    def push(self, key: str, value: float) -> None:
        series = self._series.get(key)
        if series is None:
            series = deque(maxlen=self.capacity)
            self._series[key] = series
        series.append(float(value))

    def get(self, key: str) -> list[float]:
        series = self._series.get(key)
        return list(series) if series is not None else []

    def latest(self, key: str) -> float | None:
        series = self._series.get(key)
        if not series:
            return None
        return series[-1]

    def keys(self) -> list[str]:
        return list(self._series)

    def __contains__(self, key: object) -> bool:
        return key in self._series

    def __len__(self) -> int:
        return len(self._series)
