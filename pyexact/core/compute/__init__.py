"""
Shared compute infrastructure for PyExact.

This module provides timing utilities and numerical optimization
primitives that are shared across domain-specific backends.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    timing: Execution timing utilities
    optimization: Bracketing and bounded 1-D minimization
"""

from pyexact.core.compute.timing import Timer

__all__ = [
    # Timing
    "Timer",
]
