"""
Univariate optimization utilities for PyExact.

Provides a derivative-free bounded minimizer (Brent's method) and a
downhill bracket search used to seed it. Both tolerate objectives that
return NaN at some points.
"""

from pyexact.core.compute.optimization._bracket import BracketFinder
from pyexact.core.compute.optimization._brent import (
    BoundedOptimizer,
    PointValuePair,
)

__all__ = [
    "BoundedOptimizer",
    "BracketFinder",
    "PointValuePair",
]
