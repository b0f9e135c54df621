"""Quarterly GDP growth on monthly payroll growth, aligned for a MIDAS regression."""

import logging

import numpy as np
import pandas as pd

from mfalign import design_matrix, mixed_freq_data, mixed_freq_data_single

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def make_data(seed: int = 7) -> tuple[pd.Series, pd.Series, pd.Series]:
    """Synthetic quarterly GDP growth, monthly payrolls and a monthly activity index."""
    rng = np.random.default_rng(seed)
    months = pd.date_range("1985-01-01", "2005-12-01", freq="MS")
    quarters = pd.date_range("1985-01-01", "2005-10-01", freq="QS")

    payrolls = pd.Series(rng.normal(0.15, 0.2, len(months)), index=months)
    activity = pd.Series(rng.normal(0.0, 1.0, len(months)), index=months)

    quarterly_payrolls = payrolls.resample("QS").sum().reindex(quarters)
    gdp = pd.Series(
        1.5 + 2.0 * quarterly_payrolls.to_numpy() + rng.normal(0, 0.4, len(quarters)),
        index=quarters,
    )
    # A missing release, dropped before alignment
    gdp.iloc[10] = np.nan
    return gdp, payrolls, activity


def main():
    gdp, payrolls, activity = make_data()
    est_start = pd.Timestamp("1990-01-01")
    est_end = pd.Timestamp("2002-03-01")

    payrolls_design = mixed_freq_data(
        gdp.to_numpy(),
        gdp.index,
        payrolls.to_numpy(),
        payrolls.index,
        x_lag="3q",
        y_lag=4,
        horizon=1,
        est_start=est_start,
        est_end=est_end,
    )
    activity_design = mixed_freq_data_single(
        gdp.dropna().index,
        activity.to_numpy(),
        activity.index,
        x_lag=12,
        horizon=1,
        est_start=est_start,
        est_end=est_end,
    )

    x, y, gindex = design_matrix(payrolls_design, activity_design)
    logger.info(f"Design matrix: {x.shape[0]} rows, {x.shape[1]} columns")
    logger.info(f"Groups: {np.unique(gindex).tolist()}")

    beta, *_ = np.linalg.lstsq(np.column_stack([np.ones(len(y)), x]), y, rcond=None)
    logger.info(f"OLS intercept on the aligned design: {beta[0]:.3f}")

    x_out, _, _ = design_matrix(payrolls_design, activity_design, sample="out")
    logger.info(f"Out-of-sample rows available for forecasting: {x_out.shape[0]}")


if __name__ == "__main__":
    main()
