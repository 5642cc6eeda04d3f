"""
Hypothesis test solution types.

HTestSolution wraps Result[HTestParams] from the hypothesis backend and
prints like R's print.htest: statistic and parameters to 5 significant
digits, p-value to 4, interval and estimates to 7.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from pyexact.core.result import Result
from pyexact.core.validation import check_significance
from pyexact.hypothesis._common import HTestParams, SignificanceResult

if TYPE_CHECKING:
    from pyexact.hypothesis.design import HypothesisDesign


# R's .Machine$double.eps, the floor of format.pval()
_EPS = 2.220446049250313e-16

_ALTERNATIVE_PHRASES = {
    "two.sided": "not equal to",
    "less": "less than",
    "greater": "greater than",
}


def _param(name: str, doc: str) -> property:
    def get(self: HTestSolution) -> Any:
        return getattr(self._result.params, name)
    return property(get, doc=doc)


@dataclass
class HTestSolution:
    """
    User-facing result of binom_test(), fisher_test() and the
    unconditioned tests.

    The htest fields (statistic, parameter, p_value, conf_int, estimate,
    null_value, alternative, method, data_name) read straight through to
    the HTestParams payload. The engine's SignificanceResult is kept as
    ``extras['result']`` and exposed as significance.

    Examples
    --------
    >>> sol = fisher_test([[3, 1], [1, 3]])
    >>> sol.p_value
    0.4857...
    >>> print(sol.summary())  # doctest: +SKIP
    """
    _result: Result[HTestParams]
    _design: 'HypothesisDesign | None'

    statistic = _param("statistic", "Test statistic; None for fisher_test().")
    statistic_name = _param("statistic_name", "Label of the statistic in summary().")
    parameter = _param("parameter", "e.g. {'number of trials': 20}.")
    p_value = _param("p_value", "p-value of the test.")
    conf_int = _param("conf_int", "Confidence interval, shape (2,), or None.")
    conf_level = _param("conf_level", "Confidence level of conf_int.")
    estimate = _param("estimate", "Point estimate(s) keyed by name.")
    null_value = _param("null_value", "Value under the null hypothesis.")
    alternative = _param("alternative", "'two.sided', 'less' or 'greater'.")
    method = _param("method", "Name of the test.")
    data_name = _param("data_name", "Description of the data.")
    extras = _param("extras", "Test-specific outputs.")

    @property
    def significance(self) -> SignificanceResult | None:
        """Engine result (statistic and p-value) the htest fields came from."""
        e = self.extras
        return e.get('result') if e else None

    @property
    def nuisance_parameter(self) -> float | None:
        """For unconditioned tests: success probability attaining the p-value."""
        e = self.extras
        return e.get('nuisance_parameter') if e else None

    def reject(self, alpha: float) -> bool:
        """
        True if the null hypothesis is rejected at level alpha.

        Raises
        ------
        ValidationError
            If alpha is not in (0, 0.5].
        """
        return self.p_value < check_significance(alpha)

    # --- Metadata ---

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Formatting ---

    def summary(self) -> str:
        """
        Format as R's print.htest output, e.g. for binom_test(7, 20)::

                    Exact binomial test

            data:  x and n
            number of successes = 7, number of trials = 20, p-value = 0.2632
            alternative hypothesis: true probability of success is not equal to 0.5
            95 percent confidence interval:
             0.1539092 0.5921885
            sample estimates:
            probability of success
                              0.35
        """
        p = self._result.params
        lines = [f"\t{p.method}", "", f"data:  {p.data_name}"]

        fields = []
        if p.statistic is not None:
            fields.append(f"{p.statistic_name} = {_signif(p.statistic, 5)}")
        for name, value in (p.parameter or {}).items():
            fields.append(f"{name} = {_signif(value, 5)}")
        pv = _format_pvalue(p.p_value)
        fields.append("p-value " + (pv if pv.startswith("<") else f"= {pv}"))
        lines.append(", ".join(fields))

        if p.null_value:
            name, value = next(iter(p.null_value.items()))
            lines.append(
                f"alternative hypothesis: true {name} is "
                f"{_ALTERNATIVE_PHRASES[p.alternative]} {_signif(value, 7)}"
            )
        else:
            lines.append(f"alternative hypothesis: {p.alternative}")

        if p.conf_int is not None:
            lines.append(f"{_signif(100 * p.conf_level, 7)} percent confidence interval:")
            lines.append(" " + " ".join(_format_number(x) for x in p.conf_int))

        if p.estimate:
            lines.append("sample estimates:")
            lines.extend(_named_row(p.estimate))

        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        p = self._result.params
        stat = "" if p.statistic is None else f", {p.statistic_name}={p.statistic:.4g}"
        return f"HTestSolution(method={p.method!r}{stat}, p_value={p.p_value:.4g})"


def _signif(x: float, digits: int) -> str:
    """x to the given significant digits, Inf and NaN spelled as in R."""
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "-Inf" if x < 0 else "Inf"
    return f"{x:.{digits}g}"


def _format_pvalue(p: float) -> str:
    """R's format.pval(p, digits = 4): '< 2.2e-16' below machine epsilon."""
    if p < _EPS:
        return "< 2.2e-16"
    return _signif(p, 4)


def _format_number(x: float) -> str:
    return _signif(x, 7)


def _named_row(values: dict[str, float]) -> list[str]:
    """Names over values, each column right-aligned to its wider entry."""
    names = list(values)
    cells = [_format_number(v) for v in values.values()]
    widths = [max(len(n), len(c)) for n, c in zip(names, cells)]
    return [
        " ".join(n.rjust(w) for n, w in zip(names, widths)),
        " ".join(c.rjust(w) for c, w in zip(cells, widths)),
    ]
