"""
Unconditioned exact tests on 2x2 tables: Barnard's and Boschloo's tests.

The columns of ``[[a, b], [c, d]]`` are two independent binomial samples
of sizes m = a + c and n = b + d with a common success probability pi
under the null hypothesis. Tables at least as extreme as the observed
one are collected on the grid 0 <= i <= m, 0 <= j <= n, and the p-value
is the supremum over pi of their total probability.

The supremum is found by sampling pi on a uniform grid, keeping the best
local maxima, and refining each with a bracket search followed by Brent's
method.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import special as sp_special

from pyexact.core.compute.optimization import BoundedOptimizer, BracketFinder
from pyexact.core.exceptions import ValidationError
from pyexact.core.validation import check_int_domain, check_option, check_table_2x2
from pyexact.hypothesis._common import Alternative, SignificanceResult, as_alternative
from pyexact.hypothesis._fisher import hypergeom_p_value
from pyexact.hypothesis._hypergeom import HypergeomDistribution

# Nuisance parameter grid is [LOWER_BOUND, 1 - LOWER_BOUND]
LOWER_BOUND = 1e-5
# 2**-26, about sqrt(machine epsilon)
SOLVER_RELATIVE_EPS = 1.4901161193847656e-8
# Initial bracket step as a fraction of the grid spacing
INC_FRACTION = 0.125
MAX_CANDIDATES = 3
# Local maxima within this relative distance of the best are refined
MINIMA_EPS = 0.02
# Largest number of tables (m + 1)(n + 1) that will be enumerated
MAX_TABLES = 2**31 - 1 - 8


class Method(str, Enum):
    """Statistic used to order tables by extremeness."""
    Z_POOLED = "z-pooled"
    Z_UNPOOLED = "z-unpooled"
    BOSCHLOO = "boschloo"


@dataclass(frozen=True)
class UnconditionedResult(SignificanceResult):
    """
    Result of an unconditioned exact test.

    Attributes
    ----------
    nuisance_parameter : float
        Common success probability pi at which the p-value was attained.
        0.5 when every table (or no table) is as extreme as the observed.
    """
    nuisance_parameter: float = 0.5


class _Candidates:
    """Best (point, value) minima seen, within a relative band of the lowest."""

    def __init__(self, max_size: int, eps: float):
        self._max = max(1, max_size)
        self._eps = eps
        self._data: list[tuple[float, float]] = []
        self._min = math.inf
        self._threshold = math.inf

    def add(self, k: float, v: float) -> None:
        # Keep a single NaN, and only until a number arrives
        if math.isnan(v):
            if not self._data:
                self._data.append((k, v))
            return
        if v > self._threshold:
            return
        if v < self._min:
            self._min = v
            self._threshold = v + abs(v) * self._eps
            self._data = [c for c in self._data if c[1] <= self._threshold]
        if len(self._data) == self._max:
            worst = max(range(len(self._data)), key=lambda i: self._data[i][1])
            self._data[worst] = (k, v)
        else:
            self._data.append((k, v))

    def minimum(self) -> tuple[float, float]:
        return min(self._data, key=lambda c: c[1])

    def __iter__(self):
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)


def _z_grid(m: int, n: int, pooled: bool) -> NDArray[np.float64]:
    """z statistic for every table (i, j), shape (m + 1, n + 1)."""
    i = np.arange(m + 1, dtype=np.float64)[:, None]
    j = np.arange(n + 1, dtype=np.float64)[None, :]
    p0 = i / m
    p1 = j / n
    with np.errstate(divide='ignore', invalid='ignore'):
        if pooled:
            p = (i + j) / (float(m) + n)
            variance = p * (1 - p) * (1.0 / m + 1.0 / n)
        else:
            variance = p0 * (1 - p0) / m + p1 * (1 - p1) / n
        z = (p0 - p1) / np.sqrt(variance)
    return np.where(p0 == p1, 0.0, z)


def _z_statistic(a: int, b: int, m: int, n: int, pooled: bool) -> float:
    p0 = a / m
    p1 = b / n
    if p0 == p1:
        return 0.0
    if pooled:
        p = (a + b) / (m + n)
        variance = p * (1 - p) * (1.0 / m + 1.0 / n)
    else:
        variance = p0 * (1 - p0) / m + p1 * (1 - p1) / n
    with np.errstate(divide='ignore'):
        return float(np.float64(p0 - p1) / np.sqrt(np.float64(variance)))


def _log_binom(n: int, k: NDArray[np.int64]) -> NDArray[np.float64]:
    """log C(n, k) = -log(n + 1) - log B(n - k + 1, k + 1)."""
    return -math.log1p(n) - sp_special.betaln(n - k + 1, k + 1)


def binomial_model(
    extreme: NDArray[np.bool_], m: int, n: int,
) -> Callable[[float], float]:
    """
    Negated total probability of the marked tables as a function of pi.

        -sum C(m, i) C(n, j) pi^(i + j) (1 - pi)^(m + n - i - j)

    Terms with i + j == 0 or i + j == m + n are added without logs so the
    function is finite at pi = 0 and pi = 1.
    """
    mn = m + n
    xs, ys = np.nonzero(extreme)
    xy = xs + ys
    has_zero = bool(np.any(xy == 0))
    has_full = bool(np.any(xy == mn))
    inner = (xy != 0) & (xy != mn)
    ij = xy[inner].astype(np.float64)
    c = _log_binom(m, xs[inner]) + _log_binom(n, ys[inner])
    rest = mn - ij

    def f(pi: float) -> float:
        with np.errstate(divide='ignore', invalid='ignore'):
            logp = np.log(pi)
            log1mp = np.log1p(-pi)
            total = float(np.sum(np.exp(ij * logp + rest * log1mp + c)))
            if has_zero:
                total += float(np.exp(mn * log1mp))
            if has_full:
                total += float(np.exp(mn * logp))
        return -total

    return f


@dataclass(frozen=True)
class UnconditionedExactTest:
    """
    Barnard's (z statistic) or Boschloo's (Fisher p-value) unconditioned test.

    Immutable; use the with_* methods to derive a reconfigured test.

    Attributes
    ----------
    alternative : Alternative
        Default TWO_SIDED. GREATER_THAN means the first column has the
        larger success probability.
    method : Method
        Default BOSCHLOO.
    points : int
        Number of grid points for the nuisance parameter search, >= 2.
        Default 33.
    optimize : bool
        Refine the grid maxima with Brent's method. Default True.
    """
    alternative: Alternative = Alternative.TWO_SIDED
    method: Method = Method.BOSCHLOO
    points: int = 33
    optimize: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'alternative', as_alternative(self.alternative))
        object.__setattr__(self, 'method', as_method(self.method))
        if self.points <= 1:
            raise ValidationError(f"points: must be >= 2, got {self.points}")

    @classmethod
    def with_defaults(cls) -> UnconditionedExactTest:
        """Default instance: two-sided Boschloo test, 33 points, optimized."""
        return _DEFAULT

    def with_alternative(self, alternative: Alternative | str) -> UnconditionedExactTest:
        return replace(self, alternative=as_alternative(alternative))

    def with_method(self, method: Method | str) -> UnconditionedExactTest:
        return replace(self, method=as_method(method))

    def with_initial_points(self, points: int) -> UnconditionedExactTest:
        return replace(self, points=points)

    def with_optimize(self, optimize: bool) -> UnconditionedExactTest:
        return replace(self, optimize=bool(optimize))

    def statistic(self, table: ArrayLike) -> float:
        """
        z statistic (Barnard) or Fisher exact p-value (Boschloo).

        Raises
        ------
        ValidationError
            If the table is invalid or a column sums to zero.
        IntegerOverflowError
            If the total or the number of tables is too large.
        """
        a, b, m, n = _check_table(table)
        if self.method is Method.BOSCHLOO:
            return self._boschloo_statistic(a, b, m, n)
        return _z_statistic(a, b, m, n, self.method is Method.Z_POOLED)

    def test(self, table: ArrayLike) -> UnconditionedResult:
        """
        Unconditioned exact p-value for a 2x2 table.

        Raises
        ------
        ValidationError
            If the table is invalid or a column sums to zero.
        IntegerOverflowError
            If the total or the number of tables is too large.
        """
        a, b, m, n = _check_table(table)
        statistic, extreme = self._extreme_tables(a, b, m, n)
        if extreme is None or not extreme.any() or extreme.all():
            return UnconditionedResult(statistic, 1.0, 0.5)
        pi, p = self._maximize(binomial_model(extreme, m, n))
        return UnconditionedResult(statistic, p, pi)

    # --- table enumeration ---

    def _boschloo_statistic(self, a: int, b: int, m: int, n: int) -> float:
        dist = HypergeomDistribution(m + n, a + b, m)
        return hypergeom_p_value(dist, a, self.alternative)

    def _extreme_tables(
        self, a: int, b: int, m: int, n: int,
    ) -> tuple[float, NDArray[np.bool_] | None]:
        """Observed statistic and a mask of tables at least as extreme."""
        if self.method is Method.BOSCHLOO:
            return self._extreme_tables_boschloo(a, b, m, n)

        statistic = _z_statistic(a, b, m, n, self.method is Method.Z_POOLED)
        if self.alternative is Alternative.GREATER_THAN:
            return statistic, _z_grid(m, n, self.method is Method.Z_POOLED) >= statistic
        if self.alternative is Alternative.LESS_THAN:
            return statistic, _z_grid(m, n, self.method is Method.Z_POOLED) <= statistic
        if statistic == 0:
            # Every table is as extreme
            return statistic, None
        z = _z_grid(m, n, self.method is Method.Z_POOLED)
        return statistic, np.abs(z) >= abs(statistic)

    def _extreme_tables_boschloo(
        self, a: int, b: int, m: int, n: int,
    ) -> tuple[float, NDArray[np.bool_]]:
        statistic = self._boschloo_statistic(a, b, m, n)
        mn = m + n
        extreme = np.zeros((m + 1, n + 1), dtype=bool)
        # Tables with i + j == k share one conditional distribution
        for k in range(mn + 1):
            dist = HypergeomDistribution(mn, k, m)
            for i in range(dist.lower_bound, dist.upper_bound + 1):
                if hypergeom_p_value(dist, i, self.alternative) <= statistic:
                    extreme[i, k - i] = True
        return statistic, extreme

    # --- nuisance parameter search ---

    def _maximize(self, func: Callable[[float], float]) -> tuple[float, float]:
        """Return (pi, p) maximizing -func over [0, 1]."""
        minima = _Candidates(MAX_CANDIDATES, MINIMA_EPS)
        steps = self.points - 1
        inc = (1.0 - 2 * LOWER_BOUND) / steps

        # Sliding window v1, v2, v3; px is the position of v2. Outside the
        # interval the function is padded with 0 (its supremum).
        v2 = 0.0
        v3 = func(LOWER_BOUND)
        px = LOWER_BOUND
        for i in range(1, steps):
            x = LOWER_BOUND + i * inc
            v1 = v2
            v2 = v3
            v3 = func(x)
            _add_candidate(minima, v1, v2, v3, px)
            px = x
        x = 1 - LOWER_BOUND
        vn = func(x)
        _add_candidate(minima, v2, v3, vn, px)
        _add_candidate(minima, v3, vn, 0.0, x)

        best_x, best_v = minima.minimum()

        if self.optimize and best_v > -1:
            opt = BoundedOptimizer(SOLVER_RELATIVE_EPS, 5e-324)
            bf = BracketFinder()
            for cx, _ in minima:
                b = cx - math.copysign(inc * INC_FRACTION, cx - 0.5)
                if bf.search(func, cx, b, 0, 1):
                    res = opt.optimize(func, bf.lo, bf.hi, bf.mid, bf.f_mid)
                    x, fx = res.point, res.value
                else:
                    # Minimum at 0 or 1
                    x, fx = bf.mid, bf.f_mid
                if fx < best_v:
                    best_x, best_v = x, fx

        # The summed probability can exceed 1 by rounding; NaN passes through
        return best_x, -float(np.maximum(-1.0, best_v))


def _add_candidate(minima: _Candidates, v1: float, v2: float, v3: float, x2: float) -> None:
    low = v1 if v1 < v3 else v3
    if low < v2:
        return
    minima.add(x2, v2)


def as_method(value: Method | str | None) -> Method:
    if isinstance(value, Method):
        return value
    check_option(value, "method")
    try:
        return Method(value)
    except ValueError:
        raise ValidationError(
            f"method must be one of {tuple(m.value for m in Method)}, got {value!r}"
        ) from None


def _check_table(table: ArrayLike) -> tuple[int, int, int, int]:
    """Validate and return (a, b, m, n) with column sums m = a + c, n = b + d."""
    (a, b), (c, d) = check_table_2x2(table).tolist()
    m = a + c
    if m == 0:
        raise ValidationError("Column sum 0 is zero")
    n = b + d
    if n == 0:
        raise ValidationError("Column sum 1 is zero")
    check_int_domain((m + 1) * (n + 1), "number of tables", MAX_TABLES)
    return a, b, m, n


_DEFAULT = UnconditionedExactTest()
