"""
Small statistics helpers shared by both reports.

All functions are pure and return ``0.0`` for empty input rather than
raising, so group-level code never has to special-case empty groups.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence


def median(values: Iterable[float]) -> float:
    """Median of ``values`` with NaN entries dropped.

    Odd count → middle element; even count → mean of the two middle elements;
    empty → 0.0.
    """
    ordered = sorted(v for v in values if not math.isnan(v))
    n = len(ordered)
    if n == 0:
        return 0.0
    mid = n // 2
    if n % 2 == 1:
        return float(ordered[mid])
    return (ordered[mid - 1] + ordered[mid]) / 2.0


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def pct_over(values: Sequence[float], threshold: float) -> float:
    """Percentage (0–100) of ``values`` strictly greater than ``threshold``."""
    if not values:
        return 0.0
    over = sum(1 for v in values if v > threshold)
    return over * 100.0 / len(values)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
