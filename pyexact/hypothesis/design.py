"""
HypothesisDesign: tagged union for hypothesis test inputs.

Uses factory classmethods per test type. The `test_type` field identifies
which fields are populated. Immutable after construction.
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray, ArrayLike

from pyexact.core.exceptions import DimensionError, ValidationError
from pyexact.core.validation import (
    check_consistent_length,
    check_integer,
    check_probability,
    check_table_2x2,
)
from pyexact.hypothesis._common import Alternative, as_alternative
from pyexact.hypothesis._unconditioned import Method, as_method


def _validate_conf_level(conf_level: float) -> float:
    """Validate confidence level is in (0, 1)."""
    if not (0.0 < conf_level < 1.0):
        raise ValidationError(
            f"conf_level must be in (0, 1), got {conf_level}"
        )
    return conf_level


def _as_table(x: ArrayLike, y: ArrayLike | None) -> NDArray[np.int64]:
    """2x2 table from a table, or by cross-tabulating two factor vectors."""
    if y is None:
        return check_table_2x2(x, "x")
    x_1d = np.asarray(x).ravel()
    y_1d = np.asarray(y).ravel()
    check_consistent_length(x_1d, y_1d, names=("x", "y"))
    x_cats = np.unique(x_1d)
    y_cats = np.unique(y_1d)
    if len(x_cats) != 2 or len(y_cats) != 2:
        raise DimensionError(
            f"x and y must each have exactly 2 levels, "
            f"got {len(x_cats)} and {len(y_cats)}"
        )
    table = np.zeros((2, 2), dtype=np.int64)
    for i, xc in enumerate(x_cats):
        for j, yc in enumerate(y_cats):
            table[i, j] = np.sum((x_1d == xc) & (y_1d == yc))
    return check_table_2x2(table, "table")


@dataclass(frozen=True)
class HypothesisDesign:
    """
    Design for hypothesis tests.

    Uses a tagged-union approach: the `test_type` field identifies which
    fields are populated. Factory classmethods validate inputs.

    Do not construct directly; use factory classmethods.
    """
    test_type: str

    # Binomial test
    _successes: int | None = None
    _trials: int | None = None
    _p: float = 0.5

    # Contingency table
    _table: NDArray[np.int64] | None = None

    # Test configuration
    _alternative: Alternative = Alternative.TWO_SIDED
    _conf_level: float = 0.95

    # Unconditioned test
    _method: Method = Method.BOSCHLOO
    _points: int = 33
    _optimize: bool = True

    # Metadata
    _data_name: str = ""

    # --- Properties ---

    @property
    def successes(self) -> int | None:
        return self._successes

    @property
    def trials(self) -> int | None:
        return self._trials

    @property
    def p(self) -> float:
        return self._p

    @property
    def table(self) -> NDArray[np.int64] | None:
        return self._table

    @property
    def alternative(self) -> Alternative:
        return self._alternative

    @property
    def conf_level(self) -> float:
        return self._conf_level

    @property
    def method(self) -> Method:
        return self._method

    @property
    def points(self) -> int:
        return self._points

    @property
    def optimize(self) -> bool:
        return self._optimize

    @property
    def data_name(self) -> str:
        return self._data_name

    # --- Factory classmethods ---

    @classmethod
    def for_binom_test(
        cls,
        x: int | ArrayLike,
        n: int | None = None,
        p: float = 0.5,
        *,
        alternative: str = "two.sided",
        conf_level: float = 0.95,
    ) -> HypothesisDesign:
        """
        Build design for binom_test().

        Parameters
        ----------
        x : int or array-like
            Number of successes, or a length-2 vector of
            (successes, failures).
        n : int or None
            Number of trials. Ignored (must be None) when x has length 2.
        p : float
            Hypothesized probability of success, in [0, 1].
        alternative : str
            "two.sided", "less", or "greater".
        conf_level : float
            Confidence level for the Clopper-Pearson interval.
        """
        alt = as_alternative(alternative)
        conf_level = _validate_conf_level(conf_level)
        p = check_probability(p, "p")

        x_arr = np.atleast_1d(np.asarray(x))
        if len(x_arr) == 2:
            if n is not None:
                raise ValidationError(
                    "n must be None when x is a vector of (successes, failures)"
                )
            successes = check_integer(x_arr[0], "x")
            failures = check_integer(x_arr[1], "x")
            if failures < 0:
                raise ValidationError(f"x: failures must be non-negative, got {failures}")
            trials = successes + failures
            data_name = "x"
        elif len(x_arr) == 1:
            if n is None:
                raise ValidationError("n is required when x is a single count")
            successes = check_integer(x_arr[0], "x")
            trials = check_integer(n, "n")
            data_name = "x and n"
        else:
            raise DimensionError(
                f"x must be a count or a vector of length 2, got length {len(x_arr)}"
            )

        if trials < 1:
            raise ValidationError(f"n: number of trials must be >= 1, got {trials}")
        if successes < 0 or successes > trials:
            raise ValidationError(
                f"x: number of successes must be in [0, {trials}], got {successes}"
            )

        return cls(
            test_type="binom_test",
            _successes=successes,
            _trials=trials,
            _p=p,
            _alternative=alt,
            _conf_level=conf_level,
            _data_name=data_name,
        )

    @classmethod
    def for_fisher_test(
        cls,
        x: ArrayLike,
        y: ArrayLike | None = None,
        *,
        alternative: str = "two.sided",
    ) -> HypothesisDesign:
        """
        Build design for fisher_test().

        Parameters
        ----------
        x : array-like
            A 2x2 contingency table, or 1D factor vector.
        y : array-like or None
            If x is 1D, second factor vector to cross-tabulate.
        alternative : str
            "two.sided", "less", or "greater".
        """
        alt = as_alternative(alternative)
        table = _as_table(x, y)

        return cls(
            test_type="fisher_test",
            _table=table,
            _alternative=alt,
            _data_name="x" if y is None else "x and y",
        )

    @classmethod
    def for_unconditioned_test(
        cls,
        x: ArrayLike,
        y: ArrayLike | None = None,
        *,
        method: str = "boschloo",
        alternative: str = "two.sided",
        points: int = 33,
        optimize: bool = True,
    ) -> HypothesisDesign:
        """
        Build design for unconditioned_test().

        Parameters
        ----------
        x : array-like
            A 2x2 contingency table with the two samples in the columns,
            or 1D factor vector.
        y : array-like or None
            If x is 1D, second factor vector to cross-tabulate.
        method : str
            "boschloo", "z-pooled", or "z-unpooled".
        alternative : str
            "two.sided", "less", or "greater".
        points : int
            Initial grid size for the nuisance parameter search, >= 2.
        optimize : bool
            Refine the grid maxima with Brent's method.
        """
        alt = as_alternative(alternative)
        meth = as_method(method)
        points = check_integer(points, "points")
        if points <= 1:
            raise ValidationError(f"points: must be >= 2, got {points}")
        table = _as_table(x, y)
        for col in (0, 1):
            if table[:, col].sum() == 0:
                raise ValidationError(f"Column sum {col} is zero")

        return cls(
            test_type="unconditioned_test",
            _table=table,
            _alternative=alt,
            _method=meth,
            _points=points,
            _optimize=bool(optimize),
            _data_name="x" if y is None else "x and y",
        )
