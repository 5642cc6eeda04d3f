"""
Tests for the exact binomial test.

BinomialTest reference p-values from scipy.stats.binomtest; binom_test()
output matches R binom.test().
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import stats

from pyexact.core.exceptions import (
    DimensionError,
    MissingArgumentError,
    ValidationError,
)
from pyexact.hypothesis import Alternative, BinomialTest, binom_test

ALTERNATIVES = [Alternative.TWO_SIDED, Alternative.GREATER_THAN, Alternative.LESS_THAN]


def _direct_two_sided(n, k, p):
    """Direct sum of every pmf(i) <= pmf(k), compared on the log scale."""
    x = np.arange(n + 1)
    logpmf = stats.binom.logpmf(x, n, p)
    return stats.binom.pmf(x[logpmf <= logpmf[k]], n, p).sum()


# ═══════════════════════════════════════════════════════════════════════
# BinomialTest engine
# ═══════════════════════════════════════════════════════════════════════


class TestBinomialTestOptions:

    def test_defaults(self):
        test = BinomialTest.with_defaults()
        assert test.alternative is Alternative.TWO_SIDED
        assert BinomialTest.with_defaults() is test

    def test_with_alternative_returns_new_instance(self):
        test = BinomialTest.with_defaults()
        greater = test.with_alternative("greater")
        assert greater.alternative is Alternative.GREATER_THAN
        assert test.alternative is Alternative.TWO_SIDED

    def test_none_alternative(self):
        with pytest.raises(MissingArgumentError):
            BinomialTest.with_defaults().with_alternative(None)

    def test_unknown_alternative(self):
        with pytest.raises(ValidationError, match="alternative"):
            BinomialTest.with_defaults().with_alternative("two-sided")

    @pytest.mark.parametrize("n, k, p", [
        (10, 5, -1),
        (10, 5, 2),
        (10, -1, 0.5),
        (10, 11, 0.5),
        (-1, 5, 0.5),
        (1, 2, 0.5),
        (0, 1, 0.5),
        (10, 5, float("nan")),
    ])
    def test_invalid_arguments(self, n, k, p):
        with pytest.raises(ValidationError):
            BinomialTest.with_defaults().test(n, k, p)

    @pytest.mark.parametrize("p", [0.0, 0.3, 1.0])
    def test_zero_trials(self, p):
        for alternative in Alternative:
            r = BinomialTest(alternative).test(0, 0, p)
            assert math.isnan(r.statistic)
            assert r.p_value == 1.0


class TestBinomialTestPValues:

    @pytest.mark.parametrize("n, k, prob, expected", [
        (15, 3, 0.1, [0.18406106910639106, 0.18406106910639106, 0.944444369992464]),
        (150, 37, 0.25, [1.0, 0.5687513546881982, 0.5062937783866548]),
        (150, 67, 0.25, [2.083753914662947e-07, 1.2964820621216238e-07, 0.9999999481384629]),
        (150, 17, 0.25, [4.229481760264341e-05, 0.9999911956737946, 2.399451075709081e-05]),
    ])
    def test_reference(self, n, k, prob, expected):
        for alternative, p in zip(ALTERNATIVES, expected):
            r = BinomialTest(alternative).test(n, k, prob)
            assert r.statistic == k / n
            assert r.p_value == pytest.approx(p, rel=1e-12)

    def test_dice(self):
        # 51 sixes in 235 rolls of a die
        test = BinomialTest.with_defaults()
        assert test.test(235, 51, 1 / 6).p_value == pytest.approx(0.04375, abs=1e-4)
        assert test.with_alternative("greater").test(235, 51, 1 / 6).p_value == pytest.approx(0.02654, abs=1e-4)
        assert test.with_alternative("less").test(235, 51, 1 / 6).p_value == pytest.approx(0.982, abs=1e-4)

    @pytest.mark.parametrize("p, expected", [
        (1.0, 1), (0.9, 1), (0.8, 1), (0.7, 0.559), (0.6, 0.28), (0.5, 0.25),
        (0.4, 0.064), (0.3, 0.027), (0.2, 0.008), (0.1, 0.001), (0.0, 0),
    ])
    def test_all_successes_boundary(self, p, expected):
        assert BinomialTest.with_defaults().test(3, 3, p).p_value == pytest.approx(expected, abs=1e-4)
        # Mirror image: no successes against 1 - p
        assert BinomialTest.with_defaults().test(3, 0, 1 - p).p_value == pytest.approx(expected, abs=1e-4)

    @pytest.mark.parametrize("n", [1, 2, 10, 11, 20, 57])
    @pytest.mark.parametrize("prob", [0.1, 0.25, 0.49, 0.5, 0.51, 0.75])
    def test_every_k(self, n, prob):
        test = BinomialTest.with_defaults()
        less = test.with_alternative(Alternative.LESS_THAN)
        greater = test.with_alternative(Alternative.GREATER_THAN)
        for k in range(n + 1):
            assert less.test(n, k, prob).p_value == pytest.approx(
                stats.binom.cdf(k, n, prob), rel=1e-14)
            assert greater.test(n, k, prob).p_value == pytest.approx(
                stats.binom.sf(k - 1, n, prob), rel=1e-14)
            assert test.test(n, k, prob).p_value == pytest.approx(
                _direct_two_sided(n, k, prob), rel=1e-12), f"k={k}"

    def test_direct_summation_at_mode(self):
        r = BinomialTest.with_defaults().test(10, 5, 0.5)
        assert r.p_value == pytest.approx(_direct_two_sided(10, 5, 0.5), rel=2e-15)

    @pytest.mark.parametrize("n, k", [(10, 3), (12, 2), (15, 11), (20, 6)])
    def test_symmetric_null(self, n, k):
        r = BinomialTest.with_defaults().test(n, k, 0.5)
        assert r.p_value == pytest.approx(_direct_two_sided(n, k, 0.5), rel=1e-12)

    def test_nearly_tied_tail_excluded(self):
        # pmf(7) / pmf(3) is 1 + 1.6e-8: outcome 7 is more likely than 3
        p = 0.5 + 1e-9
        r = BinomialTest.with_defaults().test(10, 3, p)
        assert r.p_value == pytest.approx(_direct_two_sided(10, 3, p), rel=1e-12)
        assert r.p_value == pytest.approx(232 / 1024, rel=1e-8)

    @pytest.mark.parametrize("n, prob, ks", [
        (4000, 0.3, range(1000, 1401, 7)),
        (2500, 0.5, range(1150, 1351, 5)),
        (3001, 0.01, range(0, 61, 3)),
    ])
    def test_large_n_matches_composition(self, n, prob, ks):
        logpmf = stats.binom.logpmf(np.arange(n + 1), n, prob)
        test = BinomialTest.with_defaults()
        for k in ks:
            # Outer runs of outcomes no more likely than k
            mask = logpmf <= logpmf[k]
            i = int(np.argmin(mask)) - 1 if not mask.all() else n
            j = n + 1 - int(np.argmin(mask[::-1])) if not mask.all() else 0
            if j <= i + 1:
                expected = 1.0
            else:
                expected = float(stats.binom.cdf(i, n, prob)) + float(stats.binom.sf(j - 1, n, prob))
            assert test.test(n, k, prob).p_value == expected, f"k={k}"

    def test_repeated_calls_identical(self):
        test = BinomialTest.with_defaults()
        first = test.test(235, 51, 1 / 6)
        for _ in range(3):
            assert test.test(235, 51, 1 / 6) == first

    @pytest.mark.parametrize("n, k, prob", [
        (10, 5, 0.5), (11, 5, 0.5), (11, 6, 0.5),
        (20, 5, 0.25), (21, 5, 0.25), (21, 6, 0.25),
        (20, 15, 0.75), (21, 15, 0.75), (21, 16, 0.75),
    ])
    def test_mode_p_value_not_above_one(self, n, k, prob):
        assert BinomialTest.with_defaults().test(n, k, prob).p_value <= 1

    def test_reject(self):
        r = BinomialTest.with_defaults().test(235, 51, 1 / 6)
        assert r.reject(0.05)
        assert not r.reject(0.01)
        with pytest.raises(ValidationError):
            r.reject(0.6)


# ═══════════════════════════════════════════════════════════════════════
# binom_test(): R binom.test()
# ═══════════════════════════════════════════════════════════════════════


class TestBinomTestR:

    def test_mendel_peas(self):
        """
        R: binom.test(682, 925, p = 3/4)
        p-value = 0.3825; 95% CI 0.7076683 0.7654066
        """
        result = binom_test(682, 925, p=0.75)
        assert result.p_value == pytest.approx(0.3825, abs=5e-5)
        assert_allclose(result.conf_int, [0.7076683, 0.7654066], atol=1e-6)
        assert result.estimate["probability of success"] == pytest.approx(0.7372973, abs=1e-6)
        assert result.statistic == 682
        assert result.parameter == {"number of trials": 925}
        assert result.null_value == {"probability of success": 0.75}
        assert result.method == "Exact binomial test"
        assert result.data_name == "x and n"

    def test_successes_failures_vector(self):
        """R: binom.test(c(682, 243), p = 3/4)"""
        result = binom_test([682, 243], p=0.75)
        expected = binom_test(682, 925, p=0.75)
        assert result.p_value == expected.p_value
        assert_allclose(result.conf_int, expected.conf_int)
        assert result.data_name == "x"

    def test_clopper_pearson_two_sided(self):
        result = binom_test(7, 20)
        assert_allclose(result.conf_int, [
            stats.beta.ppf(0.025, 7, 14),
            stats.beta.isf(0.025, 8, 13),
        ], rtol=1e-12)
        assert result.p_value == pytest.approx(2 * stats.binom.cdf(7, 20, 0.5), rel=1e-12)

    def test_one_sided_interval_less(self):
        result = binom_test(7, 20, alternative="less", conf_level=0.9)
        assert result.conf_int[0] == 0.0
        assert result.conf_int[1] == pytest.approx(stats.beta.isf(0.1, 8, 13), rel=1e-12)
        assert result.conf_level == 0.9

    def test_one_sided_interval_greater(self):
        result = binom_test(7, 20, alternative="greater")
        assert result.conf_int[0] == pytest.approx(stats.beta.ppf(0.05, 7, 14), rel=1e-12)
        assert result.conf_int[1] == 1.0

    def test_zero_successes_interval(self):
        """R: binom.test(0, 20)$conf.int  0.0000000 0.1684335"""
        result = binom_test(0, 20)
        assert result.conf_int[0] == 0.0
        assert result.conf_int[1] == pytest.approx(0.1684335, abs=1e-6)

    def test_summary(self):
        text = binom_test(682, 925, p=0.75).summary()
        assert "Exact binomial test" in text
        assert "number of successes = 682, number of trials = 925" in text
        assert "true probability of success is not equal to 0.75" in text
        assert "95 percent confidence interval:" in text

    def test_result_metadata(self):
        result = binom_test(7, 20)
        assert result.backend_name == "cpu_hypothesis"
        assert result.info["test_type"] == "binom_test"
        assert "total_seconds" in result.timing
        assert result.warnings == ()


class TestBinomTestValidation:

    def test_n_required(self):
        with pytest.raises(ValidationError, match="n is required"):
            binom_test(7)

    def test_n_with_vector(self):
        with pytest.raises(ValidationError, match="n must be None"):
            binom_test([7, 13], 20)

    def test_bad_vector_length(self):
        with pytest.raises(DimensionError):
            binom_test([1, 2, 3])

    def test_x_above_n(self):
        with pytest.raises(ValidationError):
            binom_test(21, 20)

    def test_zero_trials(self):
        """R: binom.test(0, 0) fails; 'n' must be a positive integer."""
        with pytest.raises(ValidationError, match="trials"):
            binom_test(0, 0)

    def test_bad_conf_level(self):
        with pytest.raises(ValidationError, match="conf_level"):
            binom_test(7, 20, conf_level=1.0)

    def test_bad_alternative(self):
        with pytest.raises(ValidationError):
            binom_test(7, 20, alternative="sideways")

    def test_unknown_backend(self):
        with pytest.raises(ValidationError, match="backend"):
            binom_test(7, 20, backend="gpu")
