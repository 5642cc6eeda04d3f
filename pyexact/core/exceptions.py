"""
Exception hierarchy for PyExact.

All exceptions inherit from PyExactError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyExactError(Exception):
    """Base exception for all PyExact errors."""
    pass


class ValidationError(PyExactError, ValueError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks. Also a
    ValueError so callers using plain Python idioms can catch it.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when a table does not have the expected shape (e.g. a 2x2
    contingency table with a missing column) or when rows have
    different lengths.
    """
    pass


class IntegerOverflowError(ValidationError, OverflowError):
    """
    Integer sum exceeds the supported integer domain.

    Raised when the total of a count table (or a derived size such as
    the number of tables to enumerate) would not fit in a 32-bit signed
    integer.

    Attributes:
        value: The offending sum
        limit: The largest permitted value
    """

    def __init__(self, message: str, value: int, limit: int):
        super().__init__(message)
        self.value = value
        self.limit = limit


class MissingArgumentError(ValidationError, TypeError):
    """
    A required configuration value was None.

    Raised when an option such as the alternative hypothesis is absent.
    There is no silent default.
    """
    pass


class ConvergenceError(PyExactError):
    """
    Iterative search exceeded its evaluation budget.

    Raised when a bracketing search uses more function evaluations than
    it was configured to allow.

    Attributes:
        iterations: Number of function evaluations completed
        reason: Why the search stopped (e.g. 'max_evaluations')
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        reason: str | None = None,
    ):
        super().__init__(message)
        self.iterations = iterations
        self.reason = reason
