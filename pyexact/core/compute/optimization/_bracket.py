"""
Downhill bracketing of a univariate minimum.

Expands an initial pair of points by golden-ratio steps with parabolic
extrapolation until three points lo < mid < hi satisfy
f(mid) < min(f(lo), f(hi)) (Press et al., Numerical Recipes, mnbrak).
The result seeds BoundedOptimizer.
"""

from __future__ import annotations

import math
from typing import Callable

from pyexact.core.exceptions import ConvergenceError
from pyexact.core.validation import check_strictly_positive

# Ratio for successive interval magnification
GOLD = 1.6180339887498948482
# Smallest magnitude of the parabolic fit denominator
EPS_MIN = 1e-21


class BracketFinder:
    """
    Search for a bracket around a local minimum.

    Parameters
    ----------
    grow_limit : float
        Largest magnification allowed for a parabolic extrapolation step.
    max_evaluations : int
        Function evaluation budget per search.

    After a call to search() the bracket is available as the
    lo/mid/hi attributes with the matching f_lo/f_mid/f_hi values.
    """

    def __init__(self, grow_limit: float = 100, max_evaluations: int = 100000):
        check_strictly_positive(grow_limit, "grow_limit")
        check_strictly_positive(max_evaluations, "max_evaluations")
        self._grow_limit = float(grow_limit)
        self._max_evaluations = int(max_evaluations)
        self._evaluations = 0
        self.lo = self.mid = self.hi = math.nan
        self.f_lo = self.f_mid = self.f_hi = math.nan

    @property
    def evaluations(self) -> int:
        """Function evaluations made by the last search() call."""
        return self._evaluations

    def _value(self, func: Callable[[float], float], x: float) -> float:
        if self._evaluations >= self._max_evaluations:
            raise ConvergenceError(
                f"Too many evaluations: {self._evaluations}",
                iterations=self._evaluations,
                reason='max_evaluations',
            )
        self._evaluations += 1
        return func(x)

    def search(
        self,
        func: Callable[[float], float],
        a: float,
        b: float,
        min_x: float = 0.0,
        max_x: float = 0.0,
    ) -> bool:
        """
        Search downhill from a and b for a bracket of a minimum.

        Parameters
        ----------
        func : callable
            Objective, float -> float.
        a, b : float
            Initial points.
        min_x, max_x : float
            If min_x < max_x every evaluated point is clamped to
            [min_x, max_x]; otherwise the search is unbounded.

        Returns
        -------
        bool
            True if lo < mid < hi. False when the search stopped at a
            clamp bound (the minimum is at the bound).

        Raises
        ------
        ConvergenceError
            If the evaluation budget is exhausted.
        """
        self._evaluations = 0

        if min_x < max_x:
            def clamp(x: float) -> float:
                if x > min_x:
                    return x if x < max_x else max_x
                return min_x
        else:
            def clamp(x: float) -> float:
                return x

        grow_limit = self._grow_limit
        xa = clamp(a)
        xb = clamp(b)
        fa = self._value(func, xa)
        fb = self._value(func, xb)
        # Downhill from a to b
        if fa < fb:
            xa, xb = xb, xa
            fa, fb = fb, fa

        xc = clamp(xb + GOLD * (xb - xa))
        fc = self._value(func, xc)

        # With clamping and no interior minimum this ends when b == c at a bound
        while fc < fb:
            tmp1 = (xb - xa) * (fb - fc)
            tmp2 = (xb - xc) * (fb - fa)
            val = tmp2 - tmp1
            denom = 2 * math.copysign(max(abs(val), EPS_MIN), val)

            w = clamp(xb - ((xb - xc) * tmp2 - (xb - xa) * tmp1) / denom)
            w_lim = clamp(xb + grow_limit * (xc - xb))

            if (w - xc) * (xb - w) > 0:
                # b < w < c
                fw = self._value(func, w)
                if fw < fc:
                    # Minimum in [b, c]
                    xa, xb = xb, w
                    fa, fb = fb, fw
                    break
                elif fw > fb:
                    # Minimum in [a, w]
                    xc, fc = w, fw
                    break
                w = clamp(xc + GOLD * (xc - xb))
                fw = self._value(func, w)
            elif (w - w_lim) * (xc - w) > 0:
                # c < w < limit
                fw = self._value(func, w)
                if fw < fc:
                    xb, xc = xc, w
                    w = clamp(xc + GOLD * (xc - xb))
                    fb, fc = fc, fw
                    fw = self._value(func, w)
            elif (w - w_lim) * (w_lim - xc) >= 0:
                # c <= limit <= w
                w = w_lim
                fw = self._value(func, w)
            else:
                # Reject w, take a default step
                w = clamp(xc + GOLD * (xc - xb))
                fw = self._value(func, w)

            xa, fa = xb, fb
            xb, fb = xc, fc
            xc, fc = w, fw

        self.mid, self.f_mid = xb, fb
        if xc < xa:
            self.lo, self.f_lo = xc, fc
            self.hi, self.f_hi = xa, fa
        else:
            self.lo, self.f_lo = xa, fa
            self.hi, self.f_hi = xc, fc

        return self.lo < self.mid < self.hi
