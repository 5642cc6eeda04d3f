"""
Generic result container for all PyExact computations.

The Result class provides a standardized envelope that domain-specific
results use, carrying timing and diagnostics next to the payload.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (test type, optimizer evaluations)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for statistical computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific parameters (statistic, p-value, estimates)
        info: Structured metadata (test type, alternative, evaluations)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=HTestParams(...),
        ...     info={'test_type': 'unconditioned_test', 'evaluations': 41},
        ...     timing={'total_seconds': 0.02, 'unconditioned_test': 0.02},
        ...     backend_name='cpu_hypothesis'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
