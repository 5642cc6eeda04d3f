"""
Input validation utilities for PyExact.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - No default handling of edge cases
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

from __future__ import annotations

import math
from typing import Any, Sequence, TypeVar

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyexact.core.exceptions import (
    DimensionError,
    IntegerOverflowError,
    MissingArgumentError,
    ValidationError,
)

T = TypeVar('T')

#: Largest count total supported by the exact tests (32-bit signed int).
INT_MAX = 2**31 - 1

#: Largest significance level accepted by reject-at-alpha checks.
MAX_SIGNIFICANCE = 0.5


def check_option(value: T | None, name: str) -> T:
    """
    Verify a required option is present.

    Args:
        value: Option value
        name: Parameter name for error messages

    Returns:
        The value, unchanged

    Raises:
        MissingArgumentError: If value is None
    """
    if value is None:
        raise MissingArgumentError(f"{name}: required, got None")
    return value


def check_significance(alpha: float, name: str = "alpha") -> float:
    """
    Verify a significance level lies in (0, 0.5].

    Args:
        alpha: Significance level
        name: Parameter name for error messages

    Returns:
        alpha as float

    Raises:
        ValidationError: If alpha is outside (0, 0.5] or NaN
    """
    alpha = float(alpha)
    if not (0.0 < alpha <= MAX_SIGNIFICANCE):
        raise ValidationError(
            f"{name}: significance level must be in (0, {MAX_SIGNIFICANCE}], got {alpha}"
        )
    return alpha


def check_non_negative(value: float, name: str) -> float:
    """
    Verify a scalar is >= 0.

    Args:
        value: Scalar to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If value is negative or NaN
    """
    if not value >= 0:
        raise ValidationError(f"{name}: must be non-negative, got {value}")
    return value


def check_strictly_positive(value: float, name: str) -> float:
    """
    Verify a scalar is > 0.

    Args:
        value: Scalar to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If value is zero, negative or NaN
    """
    if not value > 0:
        raise ValidationError(f"{name}: must be strictly positive, got {value}")
    return value


def check_probability(p: float, name: str = "p") -> float:
    """
    Verify a scalar is a probability in [0, 1].

    Args:
        p: Scalar to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If p is outside [0, 1] or NaN
    """
    p = float(p)
    if not (0.0 <= p <= 1.0):
        raise ValidationError(f"{name}: must be in [0, 1], got {p}")
    return p


def check_finite(array: ArrayLike, name: str) -> None:
    """
    Verify array (or scalar) contains no NaN or Inf values.

    Args:
        array: Array to check
        name: Parameter name for error messages

    Raises:
        ValidationError: If array contains non-finite values
    """
    arr = np.asarray(array, dtype=np.float64)
    if not np.all(np.isfinite(arr)):
        n_nan = int(np.sum(np.isnan(arr)))
        n_inf = int(np.sum(np.isinf(arr)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_integer(value: Any, name: str) -> int:
    """
    Verify a scalar is integral and convert it to int.

    Accepts Python ints, numpy integers and floats with an integral value.

    Raises:
        ValidationError: If value is not an integral number
    """
    if isinstance(value, (bool, np.bool_)):
        raise ValidationError(f"{name}: must be an integer, got {value!r}")
    if isinstance(value, (int, np.integer)):
        return int(value)
    try:
        f = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name}: must be an integer, got {value!r}") from e
    if not math.isfinite(f) or f != math.floor(f):
        raise ValidationError(f"{name}: must be an integer, got {value!r}")
    return int(f)


def check_int_domain(value: int, name: str, limit: int = INT_MAX) -> int:
    """
    Verify an integer does not exceed the supported integer domain.

    Args:
        value: Integer to check
        name: Parameter name for error messages
        limit: Largest permitted value

    Raises:
        IntegerOverflowError: If value > limit
    """
    if value > limit:
        raise IntegerOverflowError(
            f"{name}: {value} exceeds the integer limit {limit}",
            value=value,
            limit=limit,
        )
    return value


def check_consistent_length(
    *arrays: NDArray[Any],
    names: tuple[str, ...]
) -> None:
    """
    Verify all arrays have the same length (first dimension).

    Args:
        *arrays: Arrays to check
        names: Parameter names for error messages (must match number of arrays)

    Raises:
        ValueError: If number of names doesn't match number of arrays
        DimensionError: If arrays have inconsistent lengths
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    if len(arrays) < 2:
        return

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_rectangular(table: ArrayLike, name: str) -> NDArray[np.int64]:
    """
    Convert a count table to a 2D int64 array.

    Ragged nested sequences are rejected before numpy sees them so the
    error names the offending row.

    Args:
        table: 2D array-like of counts
        name: Parameter name for error messages

    Returns:
        2D numpy array of int64 counts

    Raises:
        DimensionError: If the table is not 2D or rows differ in length
        ValidationError: If any entry is non-finite or not integral
    """
    if isinstance(table, Sequence):
        rows = list(table)
        if rows and all(isinstance(r, (Sequence, np.ndarray)) for r in rows):
            width = len(rows[0])
            for i, r in enumerate(rows):
                if len(r) != width:
                    raise DimensionError(
                        f"{name}: row {i} has length {len(r)}, expected {width}"
                    )
    arr = np.asarray(table)
    if arr.ndim != 2:
        raise DimensionError(
            f"{name}: expected 2D array, got {arr.ndim}D with shape {arr.shape}"
        )
    if not np.issubdtype(arr.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {arr.dtype}, expected integer counts"
        )
    if not np.issubdtype(arr.dtype, np.integer):
        check_finite(arr, name)
        if np.any(arr != np.floor(arr)):
            raise ValidationError(f"{name}: entries must be integers, got {arr.tolist()}")
    return arr.astype(np.int64)


def check_sum_fits(table: NDArray[np.int64], name: str, limit: int = INT_MAX) -> int:
    """
    Sum an N-by-M count table exactly and verify it fits the integer domain.

    Args:
        table: Integer array of counts
        name: Parameter name for error messages
        limit: Largest permitted total

    Returns:
        The exact total as a Python int

    Raises:
        IntegerOverflowError: If the total exceeds limit
    """
    total = sum(int(v) for v in table.ravel())
    return check_int_domain(total, f"{name} sum", limit)


def check_table_2x2(table: ArrayLike, name: str = "table") -> NDArray[np.int64]:
    """
    Validate a 2x2 contingency table of counts.

    Args:
        table: 2x2 array-like of non-negative integer counts
        name: Parameter name for error messages

    Returns:
        2x2 int64 array

    Raises:
        DimensionError: If the table is not exactly 2x2
        ValidationError: If any count is negative or the total is zero
        IntegerOverflowError: If the total exceeds 2**31 - 1
    """
    arr = check_rectangular(table, name)
    if arr.shape != (2, 2):
        raise DimensionError(f"{name}: expected shape (2, 2), got {arr.shape}")
    if np.any(arr < 0):
        raise ValidationError(
            f"{name}: all entries must be non-negative, got {arr.tolist()}"
        )
    total = check_sum_fits(arr, name)
    if total == 0:
        raise ValidationError(f"{name}: sum of entries must be positive, got 0")
    return arr
