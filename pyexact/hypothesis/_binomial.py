"""
Exact binomial test.

The two-sided p-value is the probability of all outcomes no more likely
than the observed one. Outcomes are classified by binary search over the
log pmf on either side of the mode, and the mass is taken from the
binomial cdf/sf instead of summing point probabilities.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from scipy import stats as sp_stats

from pyexact.core.exceptions import ValidationError
from pyexact.core.validation import check_int_domain, check_integer, check_probability
from pyexact.hypothesis._common import (
    Alternative, SignificanceResult, as_alternative,
)
from pyexact.hypothesis._searches import search_ascending, search_descending


@dataclass(frozen=True)
class BinomialTest:
    """
    Exact test of a binomial success probability.

    Immutable; use with_alternative() to derive a reconfigured test.

    Attributes
    ----------
    alternative : Alternative
        Alternative hypothesis. Default TWO_SIDED.

    Examples
    --------
    >>> BinomialTest.with_defaults().test(235, 51, 1 / 6).p_value
    0.0437...
    """
    alternative: Alternative = Alternative.TWO_SIDED

    def __post_init__(self):
        object.__setattr__(self, 'alternative', as_alternative(self.alternative))

    @classmethod
    def with_defaults(cls) -> BinomialTest:
        """Default instance: two-sided."""
        return _DEFAULT

    def with_alternative(self, alternative: Alternative | str) -> BinomialTest:
        return replace(self, alternative=as_alternative(alternative))

    def test(self, n: int, k: int, p: float) -> SignificanceResult:
        """
        Test k successes in n trials against success probability p.

        Parameters
        ----------
        n : int
            Number of trials, >= 0.
        k : int
            Number of successes, 0 <= k <= n.
        p : float
            Hypothesized probability of success, in [0, 1].

        Returns
        -------
        SignificanceResult
            statistic is k / n, NaN when n is 0.

        Raises
        ------
        ValidationError
            If n < 0, k < 0, k > n, or p is outside [0, 1].

        Notes
        -----
        Zero trials are accepted, unlike R's binom.test() and the
        ``n < 1`` argument check of binom_test(): Binomial(0, p) is a
        point mass at 0, so the test is uninformative and every
        p-value is 1.
        """
        n = check_integer(n, "n")
        k = check_integer(k, "k")
        if n < 0:
            raise ValidationError(f"n: number of trials must be non-negative, got {n}")
        check_int_domain(n, "n")
        if k < 0:
            raise ValidationError(f"k: number of successes must be non-negative, got {k}")
        if k > n:
            raise ValidationError(
                f"k: number of successes must be <= n, got n = {n}, k = {k}"
            )
        p = check_probability(p, "p")

        if self.alternative is Alternative.GREATER_THAN:
            p_value = _sf(k - 1, n, p)
        elif self.alternative is Alternative.LESS_THAN:
            p_value = _cdf(k, n, p)
        elif self.alternative is Alternative.TWO_SIDED:
            p_value = _two_sided(n, k, p)
        else:
            raise ValueError(f"Unknown alternative: {self.alternative!r}")
        return SignificanceResult(statistic=k / n if n else math.nan, p_value=p_value)


_DEFAULT = BinomialTest()


def _cdf(x: int, n: int, p: float) -> float:
    return float(sp_stats.binom.cdf(x, n, p))


def _sf(x: int, n: int, p: float) -> float:
    return float(sp_stats.binom.sf(x, n, p))


def _two_sided(n: int, k: int, p: float) -> float:
    """Sum of P(X = i) over all i with P(X = i) <= P(X = k)."""
    def logpmf(i: int) -> float:
        return float(sp_stats.binom.logpmf(i, n, p))

    threshold = logpmf(k)

    # Lower and upper mode; equal unless (n + 1) p is an integer
    m1 = math.ceil((n + 1.0) * p) - 1
    m2 = math.floor((n + 1.0) * p)
    if k < m1:
        # Low side is [0, k]; find where the high side starts
        j = search_descending(m2, n, threshold, logpmf)
        return _cdf(k, n, p) + _sf(j - 1, n, p)
    if k > m2:
        # High side is [k, n]; find where the low side ends
        i = search_ascending(0, m1, threshold, logpmf)
        return _cdf(i, n, p) + _sf(k - 1, n, p)
    # k is a mode: everything except a strictly more likely other mode
    other = m2 if k == m1 else m1
    if logpmf(other) > threshold:
        return _cdf(other - 1, n, p) + _sf(other, n, p)
    return 1.0
