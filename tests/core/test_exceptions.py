"""
Tests for PyExact exception hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via PyExactError)
    - Built-in bases (ValueError, OverflowError, TypeError) for plain idioms
    - Diagnostic attributes on IntegerOverflowError and ConvergenceError
    - Default attribute values (None for optional attributes)
"""

import pytest

from pyexact.core.exceptions import (
    ConvergenceError,
    DimensionError,
    IntegerOverflowError,
    MissingArgumentError,
    PyExactError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via PyExactError."""

    def test_validation_error_is_pyexact_error(self):
        with pytest.raises(PyExactError):
            raise ValidationError("bad input")

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            raise ValidationError("bad input")

    def test_dimension_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise DimensionError("wrong shape")

    def test_overflow_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise IntegerOverflowError("too big", value=2**31, limit=2**31 - 1)

    def test_overflow_error_is_builtin_overflow(self):
        with pytest.raises(OverflowError):
            raise IntegerOverflowError("too big", value=2**31, limit=2**31 - 1)

    def test_missing_argument_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise MissingArgumentError("alternative: required, got None")

    def test_missing_argument_is_type_error(self):
        with pytest.raises(TypeError):
            raise MissingArgumentError("alternative: required, got None")

    def test_convergence_error_is_pyexact_error(self):
        with pytest.raises(PyExactError):
            raise ConvergenceError("too many evaluations", iterations=10)

    def test_convergence_error_is_not_validation_error(self):
        assert not issubclass(ConvergenceError, ValidationError)


# ═══════════════════════════════════════════════════════════════════════
# Diagnostic attributes
# ═══════════════════════════════════════════════════════════════════════


class TestIntegerOverflowError:

    def test_attributes(self):
        e = IntegerOverflowError("table sum: 4294967294 exceeds", value=4294967294, limit=2147483647)
        assert e.value == 4294967294
        assert e.limit == 2147483647
        assert "4294967294" in str(e)


class TestConvergenceError:

    def test_attributes(self):
        e = ConvergenceError("Too many evaluations: 100", iterations=100, reason="max_evaluations")
        assert e.iterations == 100
        assert e.reason == "max_evaluations"
        assert str(e) == "Too many evaluations: 100"

    def test_reason_defaults_to_none(self):
        e = ConvergenceError("stopped", iterations=3)
        assert e.reason is None
