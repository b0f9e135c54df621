"""Mixed-frequency alignment of a low-frequency target and a high-frequency covariate."""

import logging
import warnings
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from mfalign.core.data.meta.dataset import AlignmentResult, TimeSeriesData
from mfalign.core.dates.calendar import (
    as_datetime_index,
    from_epoch_days,
    shift_date,
    to_epoch_days,
)
from mfalign.core.errors import (
    AlignmentError,
    ClampWarning,
    InsufficientDataError,
    NegativeLagError,
    TruncationWarning,
)
from mfalign.core.frequency.detector import Frequency, detect_frequency
from mfalign.core.frequency.lags import normalize_lag, normalize_lags

logger = logging.getLogger(__name__)

# Tolerance, in days, when comparing numeric dates
DATE_TOLERANCE = 1e-10


@dataclass
class SampleWindow:
    """Feasible bounds and row locations of the estimation and forecast samples."""

    min_date: pd.Timestamp
    max_date: pd.Timestamp
    est_start: pd.Timestamp
    est_end: pd.Timestamp
    loc_start: int
    loc_end: int
    loc_forecast_end: int

    @property
    def est_rows(self) -> np.ndarray:
        return np.arange(self.loc_start, self.loc_end + 1)

    @property
    def out_rows(self) -> np.ndarray:
        return np.arange(self.loc_end + 1, self.loc_forecast_end + 1)


def _warn(message: str, category: type[Warning]) -> None:
    logger.warning(message)
    warnings.warn(message, category, stacklevel=3)


def _check_lags(**lags: int) -> None:
    for name, value in lags.items():
        if value < 0:
            raise NegativeLagError(f"{name} cannot be negative, got {value}")


def feasible_bounds(
    ref_dates: pd.DatetimeIndex,
    x_dates: pd.DatetimeIndex,
    ref_lag: int,
    x_lag: int,
    horizon: int,
    x_frequency: Frequency,
) -> tuple[pd.Timestamp, pd.Timestamp]:
    """Earliest and latest target dates supported by the lags and horizon.

    The earliest date leaves ``ref_lag`` low-frequency observations and
    ``x_lag + horizon`` high-frequency observations before it. The latest date
    is the last date of both series, with the high-frequency end pulled back
    by ``|horizon|`` periods when the horizon is negative.
    """
    if ref_lag >= len(ref_dates):
        raise InsufficientDataError(
            f"{len(ref_dates)} low-frequency observations cannot support "
            f"{ref_lag} lag(s)"
        )
    x_start = max(1, x_lag + horizon)
    if x_start > len(x_dates):
        raise InsufficientDataError(
            f"{len(x_dates)} high-frequency observations cannot support "
            f"{x_lag} lag(s) at horizon {horizon}"
        )

    min_date = max(ref_dates[ref_lag], x_dates[x_start - 1])

    max_date_x = x_dates[-1]
    if horizon < 0:
        max_date_x = shift_date(
            max_date_x, x_frequency.period * horizon, x_frequency.unit
        )
    max_date = min(ref_dates[-1], max_date_x)

    return pd.Timestamp(min_date), pd.Timestamp(max_date)


def clamp_window(
    min_date: pd.Timestamp,
    max_date: pd.Timestamp,
    est_start: Any = None,
    est_end: Any = None,
) -> tuple[pd.Timestamp, pd.Timestamp]:
    """Default and clamp the estimation window into ``[min_date, max_date]``."""
    if est_start is None:
        est_start = min_date
    else:
        est_start = pd.Timestamp(est_start)
        if est_start < min_date:
            _warn(
                "Start date cannot be earlier than possible due to lagged regressors. "
                f"Reset start date to most recent possible: {min_date.date()}",
                ClampWarning,
            )
            est_start = min_date
        elif est_start > max_date:
            _warn(
                "Start date cannot be later than largest date accounting for lags. "
                f"Reset start date to largest date possible: {max_date.date()}",
                ClampWarning,
            )
            est_start = max_date

    if est_end is None:
        est_end = max_date
    else:
        est_end = pd.Timestamp(est_end)
        if est_end > max_date:
            _warn(
                "Terminal date cannot be later than largest date accounting for lags. "
                f"Reset to largest date possible: {max_date.date()}",
                ClampWarning,
            )
            est_end = max_date
        elif est_end < min_date:
            _warn(
                "Terminal date cannot be earlier than possible due to lagged regressors. "
                f"Reset to earliest date possible: {min_date.date()}",
                ClampWarning,
            )
            est_end = min_date

    if est_start > est_end:
        raise AlignmentError(
            f"Empty estimation window: start {est_start.date()} is after "
            f"end {est_end.date()}"
        )
    return est_start, est_end


def _first_on_or_after(dates_num: np.ndarray, date: pd.Timestamp) -> int:
    """Index of the first numeric date not earlier than ``date``."""
    target = to_epoch_days([date])[0]
    return int(np.searchsorted(dates_num, target - DATE_TOLERANCE, side="left"))


def sample_window(
    ref_dates: pd.DatetimeIndex,
    x_dates: pd.DatetimeIndex,
    ref_lag: int,
    x_lag: int,
    horizon: int,
    x_frequency: Frequency,
    est_start: Any = None,
    est_end: Any = None,
) -> SampleWindow:
    """Locate the estimation and out-of-sample rows of the low-frequency series."""
    min_date, max_date = feasible_bounds(
        ref_dates, x_dates, ref_lag, x_lag, horizon, x_frequency
    )
    est_start, est_end = clamp_window(min_date, max_date, est_start, est_end)

    ref_num = to_epoch_days(ref_dates)
    window = SampleWindow(
        min_date=min_date,
        max_date=max_date,
        est_start=est_start,
        est_end=est_end,
        loc_start=_first_on_or_after(ref_num, est_start),
        loc_end=_first_on_or_after(ref_num, est_end),
        loc_forecast_end=_first_on_or_after(ref_num, max_date),
    )
    logger.debug(
        f"Sample window: min {min_date}, max {max_date}, rows "
        f"[{window.loc_start}, {window.loc_end}], forecast end {window.loc_forecast_end}"
    )
    return window


def lag_windows(
    target_dates: np.ndarray,
    x: np.ndarray,
    x_dates: np.ndarray,
    x_lag: int,
    horizon: int,
) -> tuple[np.ndarray, np.ndarray]:
    """High-frequency lag windows for each target date.

    For a target date the window ends ``horizon`` observations before the
    first high-frequency date on or after the target, and holds the ``x_lag``
    most recent values, most recent first. Rows are built in date order and
    building stops at the first target with no high-frequency date on or
    after it, or whose window ends past the last high-frequency observation,
    so the result may have fewer rows than ``target_dates``.

    Args:
        target_dates: Target dates as ``datetime64`` values
        x: High-frequency values
        x_dates: High-frequency dates as ``datetime64`` values
        x_lag: Number of lags per window
        horizon: Offset in high-frequency periods

    Returns:
        Tuple of (values, dates), each of shape ``(rows built, x_lag)``
    """
    x_num = to_epoch_days(x_dates)
    n_x = len(x_num)

    value_rows: list[np.ndarray] = []
    date_rows: list[np.ndarray] = []
    for target in to_epoch_days(target_dates):
        loc = int(np.searchsorted(x_num, target - DATE_TOLERANCE, side="left"))
        # No high-frequency date on or after the target: the window cannot be placed
        if loc == n_x:
            break

        latest = loc - horizon
        if latest >= n_x:
            break
        earliest = latest - x_lag + 1
        if earliest < 0:
            raise InsufficientDataError(
                f"Not enough high-frequency history for target "
                f"{from_epoch_days([target])[0].date()}"
            )

        window = np.arange(latest, earliest - 1, -1)
        value_rows.append(x[window])
        date_rows.append(x_dates[window])

    n_rows = len(value_rows)
    values = np.array(value_rows, dtype=float).reshape(n_rows, x_lag)
    dates = np.array(date_rows, dtype="datetime64[ns]").reshape(n_rows, x_lag)
    return values, dates


def _target_lags(y: np.ndarray, y_dates: np.ndarray, rows: np.ndarray, y_lag: int):
    """Low-frequency self-lags by index back-shift: column ``m - 1`` is lag ``m``."""
    lag_index = rows[:, None] - np.arange(1, y_lag + 1)[None, :]
    lag_index = lag_index.reshape(len(rows), y_lag)
    return y[lag_index], y_dates[lag_index]


def align(
    low: TimeSeriesData,
    high: TimeSeriesData,
    x_lag: Any,
    y_lag: Any,
    horizon: Any,
    est_start: Any = None,
    est_end: Any = None,
) -> AlignmentResult:
    """Build the lag design of a low-frequency target on a high-frequency covariate.

    Args:
        low: Low-frequency target series
        high: High-frequency covariate series
        x_lag: High-frequency lags, in high-frequency periods or symbolic ("3m")
        y_lag: Target self-lags, in low-frequency periods or symbolic ("1q")
        horizon: Forecast horizon in high-frequency periods or symbolic
        est_start: Estimation start date, defaults to the earliest feasible date
        est_end: Estimation end date, defaults to the latest feasible date.
            Rows after it form the out-of-sample segment.

    Returns:
        AlignmentResult with estimation and out-of-sample lag matrices

    Raises:
        NegativeLagError: If a lag normalizes to a negative number of periods
        LagParseError: If a symbolic lag cannot be parsed
        InsufficientDataError: If the series are too short for the lags
    """
    y_frequency = detect_frequency(low.dates)
    x_frequency = detect_frequency(high.dates)
    y_lag, x_lag, horizon = normalize_lags(
        y_lag, x_lag, horizon, y_frequency, x_frequency
    )
    _check_lags(y_lag=y_lag, x_lag=x_lag)

    logger.info(f"Frequency of data Y: {y_frequency}")
    logger.info(f"Frequency of data X: {x_frequency}")

    window = sample_window(
        low.dates, high.dates, y_lag, x_lag, horizon, x_frequency, est_start, est_end
    )
    logger.info(f"Start date: {window.est_start.date()}")
    logger.info(f"Terminal date: {window.est_end.date()}")

    y = np.array(low.values, dtype=float)
    y_dates = np.array(low.dates.values, dtype="datetime64[ns]")
    x = np.array(high.values, dtype=float)
    x_dates = np.array(high.dates.values, dtype="datetime64[ns]")

    est_rows = window.est_rows
    out_rows = window.out_rows
    est_lag_y, est_lag_ydate = _target_lags(y, y_dates, est_rows, y_lag)
    out_lag_y, out_lag_ydate = _target_lags(y, y_dates, out_rows, y_lag)

    est_x, est_xdate = lag_windows(y_dates[est_rows], x, x_dates, x_lag, horizon)
    max_date = window.max_date
    nobs = len(est_x)
    if nobs < len(est_rows):
        est_rows = est_rows[:nobs]
        est_lag_y, est_lag_ydate = est_lag_y[:nobs], est_lag_ydate[:nobs]
        if nobs:
            max_date = pd.Timestamp(y_dates[est_rows[-1]])
        _warn(
            "High-frequency data ends before the lag window. "
            "Observations are further "
            f"truncated to max date possible: {max_date.date()}",
            TruncationWarning,
        )

    out_x, out_xdate = lag_windows(y_dates[out_rows], x, x_dates, x_lag, horizon)
    n_forecast = len(out_x)
    if n_forecast < len(out_rows):
        out_rows = out_rows[:n_forecast]
        out_lag_y, out_lag_ydate = out_lag_y[:n_forecast], out_lag_ydate[:n_forecast]
        _warn(
            "High-frequency data ends before the lag window. "
            "Out-of-sample observations are "
            f"truncated to {n_forecast} row(s)",
            TruncationWarning,
        )

    logger.info(f"Aligned {nobs} estimation and {n_forecast} out-of-sample rows")

    return AlignmentResult(
        est_y=y[est_rows],
        est_ydate=y_dates[est_rows],
        est_x=est_x,
        est_xdate=est_xdate,
        est_lag_y=est_lag_y,
        est_lag_ydate=est_lag_ydate,
        out_y=y[out_rows],
        out_ydate=y_dates[out_rows],
        out_x=out_x,
        out_xdate=out_xdate,
        out_lag_y=out_lag_y,
        out_lag_ydate=out_lag_ydate,
        x_lag=x_lag,
        y_lag=y_lag,
        horizon=horizon,
        min_date=window.min_date,
        max_date=max_date,
        est_start=window.est_start,
        est_end=window.est_end,
        x_frequency=x_frequency,
        y_frequency=y_frequency,
    )


def align_single(
    ref_dates: Any,
    high: TimeSeriesData,
    x_lag: Any,
    horizon: Any,
    est_start: Any = None,
    est_end: Any = None,
) -> AlignmentResult:
    """Build high-frequency lag windows against a low-frequency reference date grid.

    Same as :func:`align` without target values or target self-lags; the
    feasible start still leaves one reference period before the first row.
    """
    ref_dates = as_datetime_index(ref_dates)
    if not ref_dates.is_monotonic_increasing or not ref_dates.is_unique:
        raise ValueError("Reference dates must be strictly increasing")

    ref_frequency = detect_frequency(ref_dates)
    x_frequency = detect_frequency(high.dates)
    ref_lag = normalize_lag(1, ref_frequency)
    x_lag = normalize_lag(x_lag, x_frequency)
    horizon = normalize_lag(horizon, x_frequency)
    _check_lags(ref_lag=ref_lag, x_lag=x_lag)

    logger.info(f"Frequency of reference dates: {ref_frequency}")
    logger.info(f"Frequency of data X: {x_frequency}")

    window = sample_window(
        ref_dates, high.dates, ref_lag, x_lag, horizon, x_frequency, est_start, est_end
    )
    logger.info(f"Start date: {window.est_start.date()}")
    logger.info(f"Terminal date: {window.est_end.date()}")

    ref = np.array(ref_dates.values, dtype="datetime64[ns]")
    x = np.array(high.values, dtype=float)
    x_dates = np.array(high.dates.values, dtype="datetime64[ns]")

    est_refdate = ref[window.est_rows]
    out_refdate = ref[window.out_rows]

    est_x, est_xdate = lag_windows(est_refdate, x, x_dates, x_lag, horizon)
    max_date = window.max_date
    if len(est_x) < len(est_refdate):
        est_refdate = est_refdate[: len(est_x)]
        if len(est_refdate):
            max_date = pd.Timestamp(est_refdate[-1])
        _warn(
            "High-frequency data ends before the lag window. "
            "Observations are further "
            f"truncated to max date possible: {max_date.date()}",
            TruncationWarning,
        )

    out_x, out_xdate = lag_windows(out_refdate, x, x_dates, x_lag, horizon)
    if len(out_x) < len(out_refdate):
        out_refdate = out_refdate[: len(out_x)]
        _warn(
            "High-frequency data ends before the lag window. "
            "Out-of-sample observations are "
            f"truncated to {len(out_x)} row(s)",
            TruncationWarning,
        )

    logger.info(
        f"Aligned {len(est_refdate)} estimation and {len(out_refdate)} "
        "out-of-sample rows"
    )

    return AlignmentResult(
        est_y=None,
        est_ydate=est_refdate,
        est_x=est_x,
        est_xdate=est_xdate,
        est_lag_y=None,
        est_lag_ydate=None,
        out_y=None,
        out_ydate=out_refdate,
        out_x=out_x,
        out_xdate=out_xdate,
        out_lag_y=None,
        out_lag_ydate=None,
        x_lag=x_lag,
        y_lag=0,
        horizon=horizon,
        min_date=window.min_date,
        max_date=max_date,
        est_start=window.est_start,
        est_end=window.est_end,
        x_frequency=x_frequency,
        y_frequency=ref_frequency,
    )


def _drop_missing(values: Any, dates: Any) -> tuple[np.ndarray, pd.DatetimeIndex]:
    values = np.asarray(values, dtype=float).ravel()
    dates = as_datetime_index(dates)
    if len(values) != len(dates):
        raise ValueError(
            f"Data and date vectors must have equal length, got {len(values)} "
            f"and {len(dates)}"
        )
    mask = ~(pd.isna(values) | dates.isna())
    if not mask.all():
        logger.debug(f"Dropped {int((~mask).sum())} missing observation(s)")
    return values[mask], dates[mask]


def mixed_freq_data(
    data_y: Any,
    data_ydate: Any,
    data_x: Any,
    data_xdate: Any,
    x_lag: Any,
    y_lag: Any,
    horizon: Any,
    est_start: Any = None,
    est_end: Any = None,
) -> AlignmentResult:
    """Align raw value and date vectors, dropping missing observations first.

    Example:
        >>> result = mixed_freq_data(
        ...     gdp, gdp_dates, payrolls, payrolls_dates,
        ...     x_lag=9, y_lag=4, horizon=1,
        ...     est_start="1990-01-01", est_end="2002-03-01",
        ... )
    """
    y, y_dates = _drop_missing(data_y, data_ydate)
    x, x_dates = _drop_missing(data_x, data_xdate)
    return align(
        TimeSeriesData(dates=y_dates, values=y),
        TimeSeriesData(dates=x_dates, values=x),
        x_lag=x_lag,
        y_lag=y_lag,
        horizon=horizon,
        est_start=est_start,
        est_end=est_end,
    )


def mixed_freq_data_single(
    data_refdate: Any,
    data_x: Any,
    data_xdate: Any,
    x_lag: Any,
    horizon: Any,
    est_start: Any = None,
    est_end: Any = None,
) -> AlignmentResult:
    """Align raw high-frequency vectors against reference dates, dropping missing values."""
    ref_dates = as_datetime_index(data_refdate)
    ref_dates = ref_dates[~ref_dates.isna()]
    x, x_dates = _drop_missing(data_x, data_xdate)
    return align_single(
        ref_dates,
        TimeSeriesData(dates=x_dates, values=x),
        x_lag=x_lag,
        horizon=horizon,
        est_start=est_start,
        est_end=est_end,
    )
