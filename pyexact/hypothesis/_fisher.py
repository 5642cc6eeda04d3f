"""
Fisher's exact test on 2x2 contingency tables.

Conditional on the margins, the top-left count of ``[[a, b], [c, d]]``
is hypergeometric with population N = a + b + c + d, K = a + b successes
and sample size n = a + c.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np
from numpy.typing import ArrayLike

from pyexact.core.validation import check_table_2x2
from pyexact.hypothesis._common import (
    Alternative, SignificanceResult, as_alternative,
)
from pyexact.hypothesis._hypergeom import HypergeomDistribution
from pyexact.hypothesis._searches import search_ascending, search_descending


def odds_ratio(a: int, b: int, c: int, d: int) -> float:
    """Sample odds ratio (a d) / (b c): inf, 0 or NaN when a product is zero."""
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.float64(float(a) * d) / np.float64(float(b) * c))


def two_sided_p_value(dist: HypergeomDistribution, k: int) -> float:
    """
    Probability of all outcomes no more likely than k.

    Exactly 1 when no support value is more likely than k.
    """
    pk = dist.pmf(k)
    m1 = dist.lower_mode
    m2 = dist.upper_mode
    if k < m1:
        j = search_descending(m2, dist.upper_bound, pk, dist.pmf)
        return dist.cdf(k) + dist.sf(j - 1)
    if k > m2:
        i = search_ascending(dist.lower_bound, m1, pk, dist.pmf)
        return dist.cdf(i) + dist.sf(k - 1)
    other = m2 if k == m1 else m1
    if dist.pmf(other) > pk:
        return dist.cdf(other - 1) + dist.sf(other)
    return 1.0


def hypergeom_p_value(dist: HypergeomDistribution, k: int, alternative: Alternative) -> float:
    """P(X >= k) for GREATER_THAN, P(X <= k) for LESS_THAN, else two-sided."""
    if alternative is Alternative.GREATER_THAN:
        return dist.sf(k - 1)
    if alternative is Alternative.LESS_THAN:
        return dist.cdf(k)
    if alternative is Alternative.TWO_SIDED:
        return two_sided_p_value(dist, k)
    raise ValueError(f"Unknown alternative: {alternative!r}")


@dataclass(frozen=True)
class FisherExactTest:
    """
    Fisher's exact test of independence in a 2x2 table.

    Immutable; use with_alternative() to derive a reconfigured test.

    Attributes
    ----------
    alternative : Alternative
        Alternative hypothesis on the odds ratio. Default TWO_SIDED.

    Examples
    --------
    >>> r = FisherExactTest.with_defaults().test([[6, 2], [1, 4]])
    >>> r.statistic, round(r.p_value, 6)
    (12.0, 0.102564)
    """
    alternative: Alternative = Alternative.TWO_SIDED

    def __post_init__(self):
        object.__setattr__(self, 'alternative', as_alternative(self.alternative))

    @classmethod
    def with_defaults(cls) -> FisherExactTest:
        """Default instance: two-sided."""
        return _DEFAULT

    def with_alternative(self, alternative: Alternative | str) -> FisherExactTest:
        return replace(self, alternative=as_alternative(alternative))

    def statistic(self, table: ArrayLike) -> float:
        """
        Sample odds ratio of a 2x2 table.

        Raises
        ------
        DimensionError
            If the table is not 2x2.
        ValidationError
            If a count is negative or all counts are zero.
        IntegerOverflowError
            If the total exceeds 2**31 - 1.
        """
        (a, b), (c, d) = check_table_2x2(table).tolist()
        return odds_ratio(a, b, c, d)

    def test(self, table: ArrayLike) -> SignificanceResult:
        """
        Exact p-value for a 2x2 table.

        Returns
        -------
        SignificanceResult
            statistic is the sample odds ratio.

        Raises
        ------
        DimensionError, ValidationError, IntegerOverflowError
            As for statistic().
        """
        (a, b), (c, d) = check_table_2x2(table).tolist()
        dist = HypergeomDistribution(a + b + c + d, a + b, a + c)
        return SignificanceResult(
            statistic=odds_ratio(a, b, c, d),
            p_value=hypergeom_p_value(dist, a, self.alternative),
        )


_DEFAULT = FisherExactTest()
