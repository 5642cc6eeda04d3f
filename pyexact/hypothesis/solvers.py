"""
Solver dispatch for hypothesis tests.

Provides R-named functions: binom_test(), fisher_test(), and the
unconditioned exact tests unconditioned_test(), barnard_test(),
boschloo_test().
"""

from __future__ import annotations

from typing import Literal
from numpy.typing import ArrayLike

from pyexact.core.exceptions import ValidationError
from pyexact.hypothesis.design import HypothesisDesign
from pyexact.hypothesis.solution import HTestSolution
from pyexact.hypothesis.backends.cpu import CPUHypothesisBackend


BackendChoice = Literal['cpu', 'auto']


def _get_backend(backend: str = 'cpu'):
    """
    Select backend for hypothesis tests.

    The exact tests are scalar, sequential computations; CPU is the only
    backend.
    """
    if backend in ('cpu', 'auto'):
        return CPUHypothesisBackend()
    raise ValidationError(
        f"Unknown backend: {backend!r}. Use 'cpu'."
    )


def binom_test(
    x: int | ArrayLike | HypothesisDesign,
    n: int | None = None,
    p: float = 0.5,
    *,
    alternative: Literal["two.sided", "less", "greater"] = "two.sided",
    conf_level: float = 0.95,
    backend: BackendChoice = 'cpu',
) -> HTestSolution:
    """
    Exact Binomial Test. Matches R binom.test().

    Parameters
    ----------
    x : int, array-like or HypothesisDesign
        Number of successes, or a vector of (successes, failures).
    n : int or None
        Number of trials; omit when x has length 2.
    p : float
        Hypothesized probability of success. Default 0.5.
    alternative : str
        "two.sided" (default), "less", or "greater".
    conf_level : float
        Confidence level for the Clopper-Pearson interval. Default 0.95.
    backend : str
        'cpu' (default).

    Returns
    -------
    HTestSolution
        statistic (number of successes), p_value, conf_int, and the
        estimated probability of success.
    """
    if isinstance(x, HypothesisDesign):
        design = x
    else:
        design = HypothesisDesign.for_binom_test(
            x, n, p,
            alternative=alternative,
            conf_level=conf_level,
        )

    be = _get_backend(backend)
    result = be.solve(design)
    return HTestSolution(_result=result, _design=design)


def fisher_test(
    x: ArrayLike | HypothesisDesign,
    y: ArrayLike | None = None,
    *,
    alternative: Literal["two.sided", "less", "greater"] = "two.sided",
    backend: BackendChoice = 'cpu',
) -> HTestSolution:
    """
    Fisher's Exact Test for Count Data on a 2x2 table.

    p-values match R fisher.test().

    Parameters
    ----------
    x : array-like or HypothesisDesign
        A 2x2 contingency table.
    y : array-like or None
        If x is 1D, second factor to cross-tabulate (two levels each).
    alternative : str
        "two.sided" (default), "less", or "greater".
    backend : str
        'cpu' (default).

    Returns
    -------
    HTestSolution
        Test result with p_value and the sample odds ratio as estimate.
    """
    if isinstance(x, HypothesisDesign):
        design = x
    else:
        design = HypothesisDesign.for_fisher_test(
            x, y,
            alternative=alternative,
        )

    be = _get_backend(backend)
    result = be.solve(design)
    return HTestSolution(_result=result, _design=design)


def unconditioned_test(
    x: ArrayLike | HypothesisDesign,
    y: ArrayLike | None = None,
    *,
    method: Literal["boschloo", "z-pooled", "z-unpooled"] = "boschloo",
    alternative: Literal["two.sided", "less", "greater"] = "two.sided",
    points: int = 33,
    optimize: bool = True,
    backend: BackendChoice = 'cpu',
) -> HTestSolution:
    """
    Unconditioned exact test comparing the columns of a 2x2 table.

    The columns are independent binomial samples; the p-value is maximized
    over their common success probability (the nuisance parameter).

    Parameters
    ----------
    x : array-like or HypothesisDesign
        A 2x2 contingency table.
    y : array-like or None
        If x is 1D, second factor to cross-tabulate.
    method : str
        "boschloo" (default), "z-pooled" (Barnard), or "z-unpooled".
    alternative : str
        "two.sided" (default), "less", or "greater".
    points : int
        Initial grid size for the nuisance parameter. Default 33.
    optimize : bool
        Refine the grid maxima with Brent's method. Default True.
    backend : str
        'cpu' (default).

    Returns
    -------
    HTestSolution
        statistic (z or Fisher p-value), p_value, nuisance_parameter.
    """
    if isinstance(x, HypothesisDesign):
        design = x
    else:
        design = HypothesisDesign.for_unconditioned_test(
            x, y,
            method=method,
            alternative=alternative,
            points=points,
            optimize=optimize,
        )

    be = _get_backend(backend)
    result = be.solve(design)
    return HTestSolution(_result=result, _design=design)


def barnard_test(
    x: ArrayLike,
    y: ArrayLike | None = None,
    *,
    pooled: bool = True,
    alternative: Literal["two.sided", "less", "greater"] = "two.sided",
    points: int = 33,
    optimize: bool = True,
) -> HTestSolution:
    """Barnard's exact test: unconditioned_test() with a z statistic."""
    return unconditioned_test(
        x, y,
        method="z-pooled" if pooled else "z-unpooled",
        alternative=alternative,
        points=points,
        optimize=optimize,
    )


def boschloo_test(
    x: ArrayLike,
    y: ArrayLike | None = None,
    *,
    alternative: Literal["two.sided", "less", "greater"] = "two.sided",
    points: int = 33,
    optimize: bool = True,
) -> HTestSolution:
    """Boschloo's exact test: unconditioned_test() ordered by Fisher p-value."""
    return unconditioned_test(
        x, y,
        method="boschloo",
        alternative=alternative,
        points=points,
        optimize=optimize,
    )
