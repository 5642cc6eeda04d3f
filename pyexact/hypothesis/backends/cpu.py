"""
CPU reference backend for hypothesis tests.

Dispatches to test-specific submodules based on design.test_type.
"""

from __future__ import annotations

import warnings

from pyexact.core.result import Result
from pyexact.core.compute.timing import Timer
from pyexact.hypothesis._common import HTestParams
from pyexact.hypothesis.design import HypothesisDesign


class CPUHypothesisBackend:
    """CPU reference backend for hypothesis tests."""

    @property
    def name(self) -> str:
        return 'cpu_hypothesis'

    def solve(self, design: HypothesisDesign) -> Result[HTestParams]:
        """Dispatch to test-specific implementation based on design.test_type."""
        timer = Timer()
        timer.start()

        test_type = design.test_type

        with timer.section(test_type):
            if test_type == "binom_test":
                from pyexact.hypothesis.backends._binom_test import binom_test
                params, warnings_list = binom_test(design)
            elif test_type == "fisher_test":
                from pyexact.hypothesis.backends._fisher_test import fisher_test
                params, warnings_list = fisher_test(design)
            elif test_type == "unconditioned_test":
                from pyexact.hypothesis.backends._unconditioned_test import unconditioned_test
                params, warnings_list = unconditioned_test(design)
            else:
                raise ValueError(f"Unknown test_type: {test_type!r}")

        timer.stop()

        for msg in warnings_list:
            warnings.warn(msg, RuntimeWarning, stacklevel=3)

        info = {'test_type': test_type, 'alternative': design.alternative.value}
        if test_type == "unconditioned_test":
            info['method'] = design.method.value
            info['points'] = design.points
            info['optimize'] = design.optimize

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
