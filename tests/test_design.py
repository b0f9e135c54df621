"""Tests for design matrix assembly."""

import numpy as np
import pandas as pd
import pytest

from mfalign.core.align.aligner import align, align_single
from mfalign.core.align.design import design_matrix
from mfalign.core.data.meta.dataset import TimeSeriesData


@pytest.fixture
def monthly_y():
    dates = pd.date_range("2020-01-01", periods=20, freq="MS")
    return TimeSeriesData(dates=dates, values=np.arange(20, dtype=float))


@pytest.fixture
def daily_dates():
    return pd.date_range("2019-12-01", "2021-08-31", freq="D")


@pytest.fixture
def payrolls(daily_dates):
    return TimeSeriesData(dates=daily_dates, values=np.arange(len(daily_dates), dtype=float))


@pytest.fixture
def spreads(daily_dates):
    rng = np.random.default_rng(0)
    return TimeSeriesData(dates=daily_dates, values=rng.normal(size=len(daily_dates)))


class TestDesignMatrix:
    """Test cases for design_matrix."""

    def test_blocks_and_groups(self, monthly_y, payrolls, spreads):
        """Test target lags come first, then one group per covariate."""
        full = align(monthly_y, payrolls, x_lag=22, y_lag=1, horizon=1)
        single = align_single(monthly_y.dates, spreads, x_lag=10, horizon=1)

        X, y, groups = design_matrix(full, single)

        assert X.shape == (19, 1 + 22 + 10)
        np.testing.assert_array_equal(y, full.est_y)
        np.testing.assert_array_equal(groups, [0] + [1] * 22 + [2] * 10)
        np.testing.assert_array_equal(X[:, 0], full.est_lag_y[:, 0])
        np.testing.assert_array_equal(X[:, 1:23], full.est_x)
        np.testing.assert_array_equal(X[:, 23:], single.est_x)

    def test_without_target_lags(self, monthly_y, payrolls, spreads):
        """Test covariate groups are numbered from zero without target lags."""
        full = align(monthly_y, payrolls, x_lag=22, y_lag=1, horizon=1)
        single = align_single(monthly_y.dates, spreads, x_lag=10, horizon=1)

        X, _, groups = design_matrix(full, single, include_y_lags=False)

        assert X.shape == (19, 32)
        np.testing.assert_array_equal(groups, [0] * 22 + [1] * 10)

    def test_single_only(self, monthly_y, spreads):
        """Test a reference-date result has no target."""
        single = align_single(monthly_y.dates, spreads, x_lag=5, horizon=1)

        X, y, groups = design_matrix(single)

        assert y is None
        np.testing.assert_array_equal(X, single.est_x)
        np.testing.assert_array_equal(groups, np.zeros(5))

    def test_out_of_sample(self, monthly_y, payrolls, spreads):
        """Test the out-of-sample rows are assembled the same way."""
        full = align(
            monthly_y, payrolls, x_lag=22, y_lag=2, horizon=1, est_end="2021-01-01"
        )
        single = align_single(
            monthly_y.dates, spreads, x_lag=10, horizon=1, est_end="2021-01-01"
        )

        X, y, groups = design_matrix(full, single, sample="out")

        assert X.shape == (7, 2 + 22 + 10)
        np.testing.assert_array_equal(y, full.out_y)
        assert groups.max() == 2

    def test_empty_covariate_block_skipped(self, monthly_y, payrolls):
        """Test a covariate with no lags contributes no columns or group."""
        result = align(monthly_y, payrolls, x_lag=0, y_lag=2, horizon=1)

        X, _, groups = design_matrix(result)

        assert result.est_x.shape == (result.nobs, 0)
        assert X.shape == (result.nobs, 2)
        np.testing.assert_array_equal(groups, [0, 0])

    def test_different_target_dates(self, monthly_y, payrolls, spreads):
        """Test results over different windows cannot be combined."""
        full = align(monthly_y, payrolls, x_lag=22, y_lag=1, horizon=1)
        single = align_single(
            monthly_y.dates, spreads, x_lag=10, horizon=1, est_end="2021-01-01"
        )

        with pytest.raises(ValueError):
            design_matrix(full, single)

    def test_invalid_arguments(self, monthly_y, payrolls):
        with pytest.raises(ValueError):
            design_matrix()

        result = align(monthly_y, payrolls, x_lag=5, y_lag=1, horizon=1)
        with pytest.raises(ValueError):
            design_matrix(result, sample="all")
