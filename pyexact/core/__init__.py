"""
Core infrastructure for PyExact.

This module provides shared abstractions and utilities used by the
domain-specific submodules.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing and 1-D optimization primitives
"""

from pyexact.core.result import Result
from pyexact.core.exceptions import (
    PyExactError,
    ValidationError,
    DimensionError,
    IntegerOverflowError,
    MissingArgumentError,
    ConvergenceError,
)

__all__ = [
    # Result
    "Result",
    # Exceptions
    "PyExactError",
    "ValidationError",
    "DimensionError",
    "IntegerOverflowError",
    "MissingArgumentError",
    "ConvergenceError",
]
