"""
Hypergeometric distribution with a cached probability table.

The pmf is evaluated once per instance: anchored at the upper mode with
scipy's hypergeom.pmf and propagated outward with the ratio of
consecutive terms

    pmf(x + 1) = pmf(x) * (K - x)(n - x) / ((x + 1)(N - K - n + x + 1))

Cumulative sums are accumulated once from each end of the support. The
cdf below the median uses the lower sums and above it the upper sums,
so neither tail is computed as 1 minus a number close to 1.

Values that underflow to zero are not stored; for large populations the
table covers only the part of the support with non-zero mass.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import cached_property

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyexact.core.exceptions import ValidationError
from pyexact.core.validation import check_int_domain, check_integer

# Ratios evaluated per vectorized step when growing the table
_BLOCK = 4096


@dataclass(frozen=True)
class _Table:
    """pmf over [offset, offset + len(pmf) - 1] and its cumulative sums."""
    offset: int
    pmf: NDArray[np.float64]
    lower: NDArray[np.float64]   # lower[i] = sum(pmf[:i + 1])
    upper: NDArray[np.float64]   # upper[i] = sum(pmf[i:])
    median: int
    median_cdf: float


def _grow_up(p: float, x: int, hi: int, N: int, K: int, n: int) -> NDArray[np.float64]:
    """pmf(x + 1), ..., pmf(hi) given pmf(x) = p, stopping at underflow."""
    parts = []
    while x < hi and p > 0:
        xs = np.arange(x, min(x + _BLOCK, hi), dtype=np.float64)
        ratios = (K - xs) * (n - xs) / ((xs + 1) * (N - K - n + xs + 1))
        block = np.cumprod(np.concatenate(([p], ratios)))[1:]
        zeros = np.flatnonzero(block == 0)
        if zeros.size:
            parts.append(block[:zeros[0]])
            break
        parts.append(block)
        x += len(xs)
        p = block[-1]
    return np.concatenate(parts) if parts else np.empty(0)


def _grow_down(p: float, x: int, lo: int, N: int, K: int, n: int) -> NDArray[np.float64]:
    """pmf(lo), ..., pmf(x - 1) given pmf(x) = p, stopping at underflow."""
    parts = []
    while x > lo and p > 0:
        xs = np.arange(x, max(x - _BLOCK, lo), -1, dtype=np.float64)
        ratios = xs * (N - K - n + xs) / ((K - xs + 1) * (n - xs + 1))
        block = np.cumprod(np.concatenate(([p], ratios)))[1:]
        zeros = np.flatnonzero(block == 0)
        if zeros.size:
            parts.append(block[:zeros[0]])
            break
        parts.append(block)
        x -= len(xs)
        p = block[-1]
    if not parts:
        return np.empty(0)
    return np.concatenate(parts)[::-1]


class HypergeomDistribution:
    """
    Hypergeometric distribution of the number of successes in a sample.

    Parameters
    ----------
    N : int
        Population size, 0 <= N <= 2**31 - 1.
    K : int
        Number of successes in the population, 0 <= K <= N.
    n : int
        Sample size, 0 <= n <= N.

    Notes
    -----
    Instances are immutable. The probability table is computed on first
    use of pmf/cdf/sf and cached. When ``(n + 1)(K + 1) / (N + 2)`` is an
    integer the distribution has two adjacent modes with equal mass;
    otherwise lower_mode == upper_mode.
    """

    def __init__(self, N: int, K: int, n: int):
        N = check_integer(N, "N")
        K = check_integer(K, "K")
        n = check_integer(n, "n")
        if N < 0:
            raise ValidationError(f"N: population size must be non-negative, got {N}")
        check_int_domain(N, "N")
        if not 0 <= K <= N:
            raise ValidationError(f"K: number of successes must be in [0, N={N}], got {K}")
        if not 0 <= n <= N:
            raise ValidationError(f"n: sample size must be in [0, N={N}], got {n}")
        self._N = N
        self._K = K
        self._n = n
        self._lo = max(0, n - (N - K))
        self._hi = min(n, K)
        # Modes from v = (n + 1)(K + 1) / (N + 2) in exact integer arithmetic
        num = (n + 1) * (K + 1)
        den = N + 2
        self._m2 = num // den
        self._m1 = -(-num // den) - 1

    def __repr__(self) -> str:
        return f"HypergeomDistribution(N={self._N}, K={self._K}, n={self._n})"

    @property
    def population_size(self) -> int:
        return self._N

    @property
    def number_of_successes(self) -> int:
        return self._K

    @property
    def sample_size(self) -> int:
        return self._n

    @property
    def lower_bound(self) -> int:
        """Smallest value with non-zero probability, max(0, n - (N - K))."""
        return self._lo

    @property
    def upper_bound(self) -> int:
        """Largest value with non-zero probability, min(n, K)."""
        return self._hi

    @property
    def lower_mode(self) -> int:
        return self._m1

    @property
    def upper_mode(self) -> int:
        return self._m2

    @cached_property
    def _table(self) -> _Table:
        N, K, n = self._N, self._K, self._n
        lo, hi = self._lo, self._hi
        if lo == hi:
            pmf = np.ones(1)
            offset = lo
        else:
            mode = min(max(self._m2, lo), hi)
            p = float(sp_stats.hypergeom.pmf(mode, N, K, n))
            below = _grow_down(p, mode, lo, N, K, n)
            above = _grow_up(p, mode, hi, N, K, n)
            pmf = np.concatenate((below, [p], above))
            offset = mode - len(below)

        lower = np.cumsum(pmf)
        upper = np.cumsum(pmf[::-1])[::-1]

        # Point where the cdf is closest to 0.5
        i = int(np.searchsorted(lower, 0.5, side='left'))
        i = min(i, len(pmf) - 1)
        p1 = float(lower[i])
        p0 = float(lower[i - 1]) if i > 0 else 0.0
        if p1 - 0.5 >= 0.5 - p0:
            i -= 1
            p1 = p0
        return _Table(
            offset=offset,
            pmf=pmf,
            lower=lower,
            upper=upper,
            median=offset + i,
            median_cdf=p1,
        )

    def _check_support(self, x: int) -> None:
        if not self._lo <= x <= self._hi:
            raise IndexError(
                f"x={x} outside the support [{self._lo}, {self._hi}]"
            )

    def pmf(self, x: int) -> float:
        """
        Probability P(X = x).

        Raises
        ------
        IndexError
            If x is outside [lower_bound, upper_bound].
        """
        self._check_support(x)
        t = self._table
        i = x - t.offset
        if 0 <= i < len(t.pmf):
            return float(t.pmf[i])
        return 0.0

    def logpmf(self, x: int) -> float:
        """Natural log of pmf(x); -inf where the mass underflows."""
        p = self.pmf(x)
        return math.log(p) if p > 0 else -math.inf

    def cdf(self, x: int) -> float:
        """P(X <= x), defined for every integer x."""
        if x < self._lo:
            return 0.0
        if x >= self._hi:
            return 1.0
        t = self._table
        i = x - t.offset
        if x < t.median:
            return float(t.lower[i]) if i >= 0 else 0.0
        if x > t.median:
            return 1 - float(t.upper[i + 1]) if i + 1 < len(t.pmf) else 1.0
        return t.median_cdf

    def sf(self, x: int) -> float:
        """P(X > x), defined for every integer x."""
        if x < self._lo:
            return 1.0
        if x >= self._hi:
            return 0.0
        t = self._table
        i = x - t.offset
        if x < t.median:
            return 1 - float(t.lower[i]) if i >= 0 else 1.0
        if x > t.median:
            return float(t.upper[i + 1]) if i + 1 < len(t.pmf) else 0.0
        return 1 - t.median_cdf
