"""
Confidence intervals for a binomial proportion.

Five standard constructions; Clopper-Pearson is the exact interval that
R's binom.test() reports.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pyexact.core.exceptions import ValidationError
from pyexact.core.validation import check_integer, check_option


def _clip(p: float) -> float:
    return min(1.0, max(0.0, p))


class BinomialConfidenceInterval(str, Enum):
    """Method for a binomial proportion confidence interval."""
    CLOPPER_PEARSON = "clopper-pearson"
    JEFFREYS = "jeffreys"
    WILSON_SCORE = "wilson"
    AGRESTI_COULL = "agresti-coull"
    NORMAL_APPROXIMATION = "normal"

    def from_error_rate(self, n: int, x: int, alpha: float) -> tuple[float, float]:
        """
        Two-sided interval with coverage 1 - alpha.

        Parameters
        ----------
        n : int
            Number of trials, > 0.
        x : int
            Number of successes, 0 <= x <= n.
        alpha : float
            Error rate in (0, 1).

        Raises
        ------
        ValidationError
            If any argument is out of range.
        """
        n = check_integer(n, "n")
        x = check_integer(x, "x")
        if n <= 0:
            raise ValidationError(f"n: number of trials must be strictly positive, got {n}")
        if x < 0:
            raise ValidationError(f"x: number of successes must be non-negative, got {x}")
        if x > n:
            raise ValidationError(
                f"x: number of successes ({x}) must be <= number of trials ({n})"
            )
        if not (0.0 < alpha < 1.0):
            raise ValidationError(f"alpha: error rate must be in (0, 1), got {alpha}")
        return self.interval(n, x, 0.5 * alpha)

    def interval(self, n: int, x: int, tail: float) -> tuple[float, float]:
        """Interval excluding probability ``tail`` on each side (unchecked)."""
        if self is BinomialConfidenceInterval.CLOPPER_PEARSON:
            lower = 0.0
            upper = 1.0
            if x == 0:
                upper = 1 - tail ** (1.0 / n)
            elif x == n:
                lower = tail ** (1.0 / n)
            else:
                lower = float(sp_stats.beta.ppf(tail, x, n - x + 1))
                upper = float(sp_stats.beta.isf(tail, x + 1, n - x))
            return lower, upper

        if self is BinomialConfidenceInterval.JEFFREYS:
            d = sp_stats.beta(x + 0.5, n - x + 0.5)
            lower = 0.0 if x == 0 else float(d.ppf(tail))
            upper = 1.0 if x == n else float(d.isf(tail))
            return lower, upper

        z = float(sp_stats.norm.isf(tail))
        p = x / n
        if self is BinomialConfidenceInterval.WILSON_SCORE:
            z2 = z * z
            denom = 1 + z2 / n
            centre = (p + 0.5 * z2 / n) / denom
            distance = z * math.sqrt(p * (1 - p) / n + z2 / (4.0 * n * n)) / denom
            return centre - distance, centre + distance

        if self is BinomialConfidenceInterval.AGRESTI_COULL:
            z2 = z * z
            nc = n + z2
            pc = (x + 0.5 * z2) / nc
            distance = z * math.sqrt(pc * (1 - pc) / nc)
            return _clip(pc - distance), _clip(pc + distance)

        if self is BinomialConfidenceInterval.NORMAL_APPROXIMATION:
            distance = z * math.sqrt(p * (1 - p) / n)
            return _clip(p - distance), _clip(p + distance)

        raise ValueError(f"Unknown interval method: {self!r}")


def binom_conf_int(
    x: int,
    n: int,
    *,
    conf_level: float = 0.95,
    method: BinomialConfidenceInterval | str = "clopper-pearson",
) -> NDArray[np.floating[Any]]:
    """
    Two-sided confidence interval for a binomial success probability.

    Parameters
    ----------
    x : int
        Number of successes.
    n : int
        Number of trials.
    conf_level : float
        Confidence level in (0, 1). Default 0.95.
    method : str
        "clopper-pearson" (default, exact), "jeffreys", "wilson",
        "agresti-coull", or "normal".

    Returns
    -------
    ndarray
        [lower, upper], shape (2,).
    """
    check_option(method, "method")
    try:
        ci = BinomialConfidenceInterval(method)
    except ValueError:
        raise ValidationError(
            f"method must be one of "
            f"{tuple(m.value for m in BinomialConfidenceInterval)}, got {method!r}"
        ) from None
    if not (0.0 < conf_level < 1.0):
        raise ValidationError(f"conf_level must be in (0, 1), got {conf_level}")
    return np.array(ci.from_error_rate(n, x, 1.0 - conf_level))
