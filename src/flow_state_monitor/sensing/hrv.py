"""Heart-rate variability statistics from accepted inter-beat intervals."""

from __future__ import annotations

import math
from collections.abc import Sequence
from statistics import fmean, pstdev

# Minimum intervals before HRV is reported
MIN_INTERVALS = 5


def compute_sdnn(rr_intervals: Sequence[float]) -> float:
    """Population standard deviation of the intervals (ms).

    Returns 0.0 when fewer than MIN_INTERVALS are available.
    """
    if len(rr_intervals) < MIN_INTERVALS:
        return 0.0
    return float(pstdev(rr_intervals))


def compute_rmssd(rr_intervals: Sequence[float]) -> float:
    """Root mean square of successive differences (ms).

    N intervals give N-1 differences, taken in sequence order. Returns 0.0
    when fewer than MIN_INTERVALS are available.
    """
    if len(rr_intervals) < MIN_INTERVALS:
        return 0.0
    diffs = [b - a for a, b in zip(rr_intervals, rr_intervals[1:])]
    return math.sqrt(fmean(d * d for d in diffs))


def compute_hrv(rr_intervals: Sequence[float]) -> tuple[float, float]:
    """Return ``(sdnn, rmssd)`` for the given intervals."""
    return compute_sdnn(rr_intervals), compute_rmssd(rr_intervals)
