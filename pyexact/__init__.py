"""
PyExact: exact tests for discrete data.

Exact p-values for the binomial test, Fisher's exact test and
Barnard/Boschloo unconditioned tests on 2x2 tables, with R-style entry
points, plus the bounded 1-D minimizer they rely on.

Submodules:
    hypothesis: Exact hypothesis tests and distributions
    core: Exceptions, validation, result envelope, optimization
"""

__version__ = "0.1.0"

from pyexact import hypothesis

__all__ = [
    "__version__",
    "hypothesis",
]
