"""
Tests for return distribution diagnostics.
"""

import pytest
import numpy as np

from quant.calculations.distribution import (
    quantile,
    skewness,
    excess_kurtosis,
    distribution_summary
)


class TestQuantile:
    """Tests for interpolated quantiles."""

    def test_median_interpolates(self):
        """Median of an even-length sample sits between the middle values."""
        assert quantile([1, 2, 3, 4], 0.5) == pytest.approx(2.5)

    def test_extremes(self):
        """q=0 and q=1 return the minimum and maximum."""
        assert quantile([3, 1, 4, 2], 0.0) == 1.0
        assert quantile([3, 1, 4, 2], 1.0) == 4.0

    def test_unsorted_input(self):
        """Input is sorted before interpolating."""
        assert quantile([4, 1, 3, 2], 0.25) == pytest.approx(1.75)

    def test_empty(self):
        """Empty input gives 0.0."""
        assert quantile([], 0.5) == 0.0


class TestSkewness:
    """Tests for bias-corrected skewness."""

    def test_symmetric_is_zero(self):
        """A symmetric sample has no skew."""
        assert skewness([1.0, 2.0, 3.0]) == pytest.approx(0.0)

    def test_right_tail_is_positive(self):
        """One large gain gives positive skew matching the sample formula."""
        values = np.array([1.0, 2.0, 10.0])
        z = (values - values.mean()) / values.std(ddof=1)
        expected = 3 / (2 * 1) * np.sum(z ** 3)
        result = skewness(values.tolist())
        assert result > 0
        assert result == pytest.approx(expected)

    def test_left_tail_is_negative(self):
        """One large loss gives negative skew."""
        assert skewness([0.01, 0.02, 0.01, -0.15]) < 0

    def test_small_or_constant(self):
        """Fewer than 3 points or zero dispersion gives 0.0."""
        assert skewness([0.01, 0.02]) == 0.0
        assert skewness([0.5, 0.5, 0.5]) == 0.0


class TestExcessKurtosis:
    """Tests for excess kurtosis."""

    def test_known_value(self):
        """[1, 2, 3, 4] has z^4 values 3.24, 0.04, 0.04, 3.24."""
        assert excess_kurtosis([1, 2, 3, 4]) == pytest.approx(6.56 / 4 - 3)

    def test_fat_tails_positive(self):
        """A single outlier among quiet returns is leptokurtic."""
        returns = [0.001] * 10 + [-0.001] * 10 + [0.2]
        assert excess_kurtosis(returns) > 0

    def test_small_or_constant(self):
        """Fewer than 4 points or zero dispersion gives 0.0."""
        assert excess_kurtosis([0.01, 0.02, 0.03]) == 0.0
        assert excess_kurtosis([0.25] * 6) == 0.0


class TestDistributionSummary:
    """Tests for distribution_summary."""

    def test_summary_fields(self):
        """Mean, sample std and average losing/winning periods."""
        returns = [0.02, -0.01, 0.03, -0.03]
        summary = distribution_summary(returns)
        assert summary['mean'] == pytest.approx(0.0025)
        assert summary['std'] == pytest.approx(np.std(returns, ddof=1))
        assert summary['downside_capture'] == pytest.approx(0.02)
        assert summary['upside_capture'] == pytest.approx(0.025)

    def test_one_sided(self):
        """No losing periods means zero downside capture."""
        summary = distribution_summary([0.01, 0.03])
        assert summary['downside_capture'] == 0.0
        assert summary['upside_capture'] == pytest.approx(0.02)

    def test_single_value(self):
        """A single return has zero std rather than a division error."""
        summary = distribution_summary([0.01])
        assert summary['std'] == 0.0

    def test_empty(self):
        """Empty returns give None."""
        assert distribution_summary([]) is None
