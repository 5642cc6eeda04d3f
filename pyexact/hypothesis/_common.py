"""
Common types for hypothesis testing.

Defines the Alternative enum, the SignificanceResult returned by the
test engines, and HTestParams (maps to R's htest class).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any
import numpy as np
from numpy.typing import NDArray

from pyexact.core.exceptions import ValidationError
from pyexact.core.validation import check_option, check_significance


class Alternative(str, Enum):
    """Alternative hypothesis. Values match R's ``alternative`` strings."""
    TWO_SIDED = "two.sided"
    GREATER_THAN = "greater"
    LESS_THAN = "less"


VALID_ALTERNATIVES = tuple(a.value for a in Alternative)


def as_alternative(value: Alternative | str | None, name: str = "alternative") -> Alternative:
    """
    Coerce an Alternative or its R string to Alternative.

    Raises
    ------
    MissingArgumentError
        If value is None.
    ValidationError
        If value is not one of VALID_ALTERNATIVES.
    """
    check_option(value, name)
    if isinstance(value, Alternative):
        return value
    try:
        return Alternative(value)
    except ValueError:
        raise ValidationError(
            f"{name} must be one of {VALID_ALTERNATIVES}, got {value!r}"
        ) from None


@dataclass(frozen=True)
class SignificanceResult:
    """
    Test statistic and p-value of a significance test.

    Attributes
    ----------
    statistic : float
        Test statistic.
    p_value : float
        p-value of the test.
    """
    statistic: float
    p_value: float

    def reject(self, alpha: float) -> bool:
        """
        True if the null hypothesis is rejected at significance level alpha.

        Raises
        ------
        ValidationError
            If alpha is not in (0, 0.5].
        """
        return self.p_value < check_significance(alpha)


@dataclass(frozen=True)
class HTestParams:
    """
    Parameter payload for hypothesis tests.

    Maps directly to R's htest structure. Every hypothesis test returns
    this same structure; test-specific extras go in the `extras` dict.

    Attributes
    ----------
    statistic : float or None
        Test statistic value (None for Fisher 2x2 exact test in R; here
        the sample odds ratio is reported under estimate).
    statistic_name : str
        Name of the test statistic ("z", "p-value").
    parameter : dict or None
        Distribution parameters, e.g. {"number of trials": 10}.
    p_value : float
        p-value of the test.
    conf_int : ndarray or None
        Confidence interval, shape (2,). None if not computed.
    conf_level : float
        Confidence level (e.g. 0.95).
    estimate : dict or None
        Point estimate(s), e.g. {"probability of success": 0.3}.
    null_value : dict or None
        Hypothesized value under H0, e.g. {"odds ratio": 1}.
    alternative : str
        "two.sided", "less", or "greater".
    method : str
        Human-readable method name, e.g. "Exact binomial test".
    data_name : str
        Description of the data, e.g. "x and n".
    extras : dict or None
        Test-specific additional outputs (e.g. the nuisance parameter of
        an unconditioned exact test).
    """
    statistic: float | None
    statistic_name: str
    parameter: dict[str, float] | None
    p_value: float
    conf_int: NDArray[np.floating[Any]] | None
    conf_level: float
    estimate: dict[str, float] | None
    null_value: dict[str, float] | None
    alternative: str
    method: str
    data_name: str
    extras: dict[str, Any] | None = None
