"""Delta arithmetic for cumulative counters."""

from __future__ import annotations

from collections.abc import Mapping

BYTES_PER_MB = 1024 * 1024


def compute_rates(
    previous: Mapping[str, float],
    current: Mapping[str, float],
    elapsed_seconds: float,
) -> dict[str, float]:
    """Per-second rate for every key present in both ``previous`` and ``current``.

    Returns an empty mapping when ``elapsed_seconds`` is not positive. A counter
    that went backwards yields a negative rate; it is not clamped.
    """
    if elapsed_seconds <= 0:
        return {}
    return {
        key: (current[key] - previous[key]) / elapsed_seconds
        for key in current
        if key in previous
    }


def bytes_to_mb(value: float) -> float:
    return value / BYTES_PER_MB
