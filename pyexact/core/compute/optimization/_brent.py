"""
Bounded univariate minimization by Brent's method.

Golden-section search combined with inverse parabolic interpolation
(R. P. Brent, "Algorithms for Minimization without Derivatives", 1973,
chapter 5). No derivatives are required and the objective may return NaN
at some points: NaN is treated as worse than any finite value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from pyexact.core.exceptions import ValidationError
from pyexact.core.validation import check_strictly_positive

# (3 - sqrt(5)) / 2
GOLDEN_SECTION = 0.3819660112501051

#: Smallest relative tolerance (2**-51, twice the machine epsilon).
MIN_RELATIVE_TOLERANCE = 2.0**-51


@dataclass(frozen=True)
class PointValuePair:
    """A point and the objective value at that point."""
    point: float
    value: float


def _ulp_equal(x: float, y: float) -> bool:
    """True if x and y are equal or adjacent doubles."""
    return x == y or math.nextafter(x, y) == y


def _better(fu: float, best: float) -> bool:
    """Strict improvement with NaN ranked below every finite value."""
    if math.isnan(fu):
        return False
    return fu < best or math.isnan(best)


class BoundedOptimizer:
    """
    Brent minimizer on a bracketing interval.

    The optimizer keeps no state between calls except the number of
    function evaluations used by the most recent call to optimize().

    Termination uses Brent's criterion on the bracket width around the
    current point x: ``|x - m| <= 2 * tol - (b - a) / 2`` where m is the
    bracket midpoint and ``tol = rel * |x| + abs``. Every step moves at
    least tol, so the search ends after a number of steps bounded by the
    bracket width; there is no separate iteration cap.

    Parameters
    ----------
    relative_tolerance : float
        Relative tolerance on the minimizer location, >= 2**-51.
    absolute_tolerance : float
        Absolute tolerance on the minimizer location, > 0.

    Examples
    --------
    >>> opt = BoundedOptimizer(1e-10, 1e-14)
    >>> res = opt.optimize(math.sin, 4, 5, 4.5, math.sin(4.5))
    >>> round(res.point, 8)
    4.71238898
    """

    def __init__(self, relative_tolerance: float, absolute_tolerance: float):
        # Negated comparison also rejects NaN
        if not relative_tolerance >= MIN_RELATIVE_TOLERANCE:
            raise ValidationError(
                f"relative_tolerance: must be >= {MIN_RELATIVE_TOLERANCE}, "
                f"got {relative_tolerance}"
            )
        check_strictly_positive(absolute_tolerance, "absolute_tolerance")
        self._rel = float(relative_tolerance)
        self._abs = float(absolute_tolerance)
        self._evaluations = 0

    @property
    def relative_tolerance(self) -> float:
        return self._rel

    @property
    def absolute_tolerance(self) -> float:
        return self._abs

    @property
    def evaluations(self) -> int:
        """Function evaluations made by the last optimize() call."""
        return self._evaluations

    def optimize(
        self,
        func: Callable[[float], float],
        lo: float,
        hi: float,
        start: float,
        f_start: float,
    ) -> PointValuePair:
        """
        Minimize func on the interval (lo, hi).

        Parameters
        ----------
        func : callable
            Objective, float -> float. May return NaN.
        lo, hi : float
            Bracket bounds, in either order. Must differ.
        start : float
            Initial point, strictly inside the bracket.
        f_start : float
            func(start); may be NaN. Not re-evaluated.

        Returns
        -------
        PointValuePair
            The best point seen and its value. This is not necessarily the
            last point evaluated.

        Raises
        ------
        ValidationError
            If the bracket is degenerate, start is not an interior point,
            or any of lo, hi, start is NaN.
        """
        if lo < hi:
            a, b = float(lo), float(hi)
        else:
            a, b = float(hi), float(lo)
        if not (a < start < b):
            raise ValidationError(
                f"Invalid bounds: ({a}, {b}) with start {start}"
            )
        x = v = w = float(start)
        d = e = 0.0
        fx = fv = fw = float(f_start)

        best_x = x
        best_fx = fx

        rel = self._rel
        abs_tol = self._abs
        self._evaluations = 0
        while True:
            m = 0.5 * (a + b)
            tol1 = rel * abs(x) + abs_tol
            tol2 = 2 * tol1

            if abs(x - m) <= tol2 - 0.5 * (b - a):
                return PointValuePair(best_x, best_fx)

            golden = True
            if abs(e) > tol1:
                # Fit parabola through x, v, w
                r = (x - w) * (fx - fv)
                q = (x - v) * (fx - fw)
                p = (x - v) * q - (x - w) * r
                q = 2 * (q - r)
                if q > 0:
                    p = -p
                else:
                    q = -q
                r = e
                e = d
                if p > q * (a - x) and p < q * (b - x) and abs(p) < abs(0.5 * q * r):
                    d = p / q
                    u = x + d
                    # Not too close to a or b
                    if u - a < tol2 or b - u < tol2:
                        d = tol1 if x <= m else -tol1
                    golden = False
            if golden:
                e = (b - x) if x < m else (a - x)
                d = GOLDEN_SECTION * e

            # Move by at least tol1; d is never NaN here
            if abs(d) < tol1:
                u = x + tol1 if d >= 0 else x - tol1
            else:
                u = x + d

            self._evaluations += 1
            fu = func(u)

            if _better(fu, best_fx):
                best_x = u
                best_fx = fu

            if fu <= fx:
                if u < x:
                    b = x
                else:
                    a = x
                v, fv = w, fw
                w, fw = x, fx
                x, fx = u, fu
            else:
                if u < x:
                    a = u
                else:
                    b = u
                if fu <= fw or _ulp_equal(w, x):
                    v, fv = w, fw
                    w, fw = u, fu
                elif fu <= fv or _ulp_equal(v, x) or _ulp_equal(v, w):
                    v, fv = u, fu
