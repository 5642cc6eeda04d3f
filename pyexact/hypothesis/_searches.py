"""
Threshold searches over monotonic integer-indexed sequences.

Used to locate where a probability mass sequence crosses the observed
mass without evaluating every point of the support.
"""

from __future__ import annotations

from typing import Callable

# Widest range handled by a linear scan
_BINARY_SEARCH = 8


def search_ascending(a: int, b: int, x: float, value: Callable[[int], float]) -> int:
    """
    Largest index i in [a, b] with value(i) <= x.

    The sequence value(a), ..., value(b) must be non-decreasing. Returns
    a - 1 if every value exceeds x (or the range is empty). Only indices
    in [a, b] are evaluated.
    """
    if b - a > _BINARY_SEARCH:
        # Bisection never evaluates the end points
        if value(a) > x:
            return a - 1
        if value(b) <= x:
            return b
        # Invariant: value(lo) <= x < value(hi)
        lo = a
        hi = b
        while lo + 1 < hi:
            mid = (lo + hi) >> 1
            if value(mid) <= x:
                lo = mid
            else:
                hi = mid
        return lo

    i = a - 1
    while i < b and value(i + 1) <= x:
        i += 1
    return i


def search_descending(a: int, b: int, x: float, value: Callable[[int], float]) -> int:
    """
    Smallest index i in [a, b] with value(i) <= x.

    The sequence value(a), ..., value(b) must be non-increasing. Returns
    b + 1 if every value exceeds x (or the range is empty). Only indices
    in [a, b] are evaluated.
    """
    # Reflect i -> a + b - i to reuse the ascending search
    offset = a + b
    return offset - search_ascending(a, b, x, lambda i: value(offset - i))
