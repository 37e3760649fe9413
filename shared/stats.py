"""
Descriptive statistics over daily counts and window points.

Zero-default policy: mean/std_dev/max/min/median return 0 on empty input
and never raise. Callers rely on this.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from common.schemas import PeakPoint, WindowPoint

__all__ = [
    "mean",
    "std_dev",
    "max_value",
    "min_value",
    "median",
    "moving_average",
    "trend_slope",
    "time_to_peak",
    "persistence",
    "safe_ratio",
    "RATIO_EPSILON",
]

RATIO_EPSILON = 1e-9


def _arr(values: Sequence[float]) -> np.ndarray:
    return np.asarray(list(values), dtype=float)


def mean(values: Sequence[float]) -> float:
    a = _arr(values)
    if a.size == 0:
        return 0.0
    return float(a.mean())


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation (ddof=0)."""
    a = _arr(values)
    if a.size == 0:
        return 0.0
    return float(a.std(ddof=0))


def max_value(values: Sequence[float]) -> float:
    a = _arr(values)
    if a.size == 0:
        return 0.0
    return float(a.max())


def min_value(values: Sequence[float]) -> float:
    a = _arr(values)
    if a.size == 0:
        return 0.0
    return float(a.min())


def median(values: Sequence[float]) -> float:
    a = _arr(values)
    if a.size == 0:
        return 0.0
    return float(np.median(a))


def moving_average(values: Sequence[float], window: int = 7) -> List[float]:
    """Centered moving average; the window is truncated at both edges."""
    data = list(values)
    half = window // 2
    out: List[float] = []
    for i in range(len(data)):
        lo = max(0, i - half)
        hi = min(len(data), i + half + 1)
        out.append(mean(data[lo:hi]))
    return out


def trend_slope(values: Sequence[float]) -> float:
    """
    Ordinary least-squares slope of the values against their sequence index
    (0, 1, 2, ...). Returns 0 for fewer than two points.
    """
    y = _arr(values)
    n = y.size
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=float)
    denom = n * float((x * x).sum()) - float(x.sum()) ** 2
    if denom == 0:
        return 0.0
    return float((n * float((x * y).sum()) - float(x.sum()) * float(y.sum())) / denom)


def time_to_peak(points: Sequence[WindowPoint]) -> Optional[PeakPoint]:
    """
    Highest count among post-event points (offset >= 0). Ties keep the
    earliest offset. None when the window has no post-event points.
    """
    best: Optional[WindowPoint] = None
    for p in sorted((p for p in points if p.offset >= 0), key=lambda p: p.offset):
        if best is None or p.count > best.count:
            best = p
    if best is None:
        return None
    return PeakPoint(offset=best.offset, count=best.count, date=best.date)


def persistence(points: Sequence[WindowPoint], threshold: float) -> int:
    """Number of post-event points (offset >= 0) strictly above threshold."""
    return sum(1 for p in points if p.offset >= 0 and p.count > threshold)


def safe_ratio(numerator: float, denominator: float) -> Optional[float]:
    """numerator / denominator, or None when the denominator is (near) zero."""
    if denominator is None or abs(denominator) < RATIO_EPSILON:
        return None
    return float(numerator) / float(denominator)
