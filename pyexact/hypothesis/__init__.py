"""
Exact hypothesis testing module.

Provides exact tests for discrete data with R-style entry points and the
underlying test engines.

Public API:
    binom_test(x, n, p)       - Exact binomial test (R binom.test)
    fisher_test(x)            - Fisher's exact test for 2x2 tables
    unconditioned_test(x)     - Barnard's / Boschloo's unconditioned test
    barnard_test(x)           - unconditioned_test with a z statistic
    boschloo_test(x)          - unconditioned_test ordered by Fisher p-value
    binom_conf_int(x, n)      - Binomial proportion confidence interval

Engines:
    BinomialTest, FisherExactTest, UnconditionedExactTest
    HypergeomDistribution
"""

from pyexact.hypothesis.solvers import (
    binom_test, fisher_test, unconditioned_test, barnard_test, boschloo_test,
)
from pyexact.hypothesis._binom_ci import BinomialConfidenceInterval, binom_conf_int
from pyexact.hypothesis._binomial import BinomialTest
from pyexact.hypothesis._fisher import FisherExactTest
from pyexact.hypothesis._hypergeom import HypergeomDistribution
from pyexact.hypothesis._unconditioned import (
    Method, UnconditionedExactTest, UnconditionedResult,
)
from pyexact.hypothesis.design import HypothesisDesign
from pyexact.hypothesis._common import Alternative, HTestParams, SignificanceResult
from pyexact.hypothesis.solution import HTestSolution

__all__ = [
    "binom_test",
    "fisher_test",
    "unconditioned_test",
    "barnard_test",
    "boschloo_test",
    "binom_conf_int",
    "BinomialConfidenceInterval",
    "BinomialTest",
    "FisherExactTest",
    "UnconditionedExactTest",
    "UnconditionedResult",
    "Method",
    "HypergeomDistribution",
    "Alternative",
    "SignificanceResult",
    "HypothesisDesign",
    "HTestParams",
    "HTestSolution",
]
