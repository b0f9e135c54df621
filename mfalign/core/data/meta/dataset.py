"""Core mixed-frequency data structures."""

from typing import Any, Literal

import numpy as np
import pandas as pd
from pydantic import BaseModel, InstanceOf, field_validator, model_validator

from mfalign.core.dates.calendar import as_datetime_index
from mfalign.core.frequency.detector import Frequency, detect_frequency


class TimeSeriesData(BaseModel):
    """A single series of observations on strictly increasing dates."""

    dates: pd.DatetimeIndex
    values: np.ndarray
    name: str | None = None

    class Config:
        arbitrary_types_allowed = True

    @field_validator("dates", mode="before")
    @classmethod
    def coerce_dates(cls, v):
        """Convert any date-like sequence to a DatetimeIndex."""
        return as_datetime_index(v)

    @field_validator("values", mode="before")
    @classmethod
    def coerce_values(cls, v):
        """Copy values into a one-dimensional float array."""
        values = np.array(v, dtype=float)
        if values.ndim != 1:
            values = values.ravel()
        return values

    @model_validator(mode="after")
    def check_series(self) -> "TimeSeriesData":
        if len(self.dates) != len(self.values):
            raise ValueError(
                f"dates and values must have equal length, got "
                f"{len(self.dates)} and {len(self.values)}"
            )
        if self.dates.hasnans:
            raise ValueError("dates must not contain missing values")
        if not np.all(np.isfinite(self.values)):
            raise ValueError(
                "values must be finite; drop missing observations before building the series"
            )
        if not self.dates.is_monotonic_increasing or not self.dates.is_unique:
            raise ValueError("dates must be strictly increasing")
        return self

    @classmethod
    def from_series(cls, series: pd.Series, dropna: bool = True) -> "TimeSeriesData":
        """Build from a pandas Series indexed by dates."""
        if dropna:
            series = series[series.notna()]
        return cls(
            dates=series.index,
            values=series.to_numpy(),
            name=None if series.name is None else str(series.name),
        )

    def __len__(self) -> int:
        return len(self.values)

    @property
    def frequency(self) -> Frequency:
        return detect_frequency(self.dates)

    def to_series(self) -> pd.Series:
        return pd.Series(self.values, index=self.dates, name=self.name)


class AlignmentResult(BaseModel):
    """Lag design for a low-frequency target and one high-frequency covariate.

    ``est_*`` fields hold the estimation sample and ``out_*`` fields the
    out-of-sample rows after the estimation end date. Date matrices are
    ``datetime64[ns]`` arrays with the same shape as the matching value
    matrices; high-frequency lag columns run from most recent to oldest.
    Results of the single-series variant carry no target values or target
    lags, and their ``*_ydate`` fields hold the reference dates.
    """

    est_y: np.ndarray | None
    est_ydate: np.ndarray
    est_x: np.ndarray
    est_xdate: np.ndarray
    est_lag_y: np.ndarray | None
    est_lag_ydate: np.ndarray | None

    out_y: np.ndarray | None
    out_ydate: np.ndarray
    out_x: np.ndarray
    out_xdate: np.ndarray
    out_lag_y: np.ndarray | None
    out_lag_ydate: np.ndarray | None

    x_lag: int
    y_lag: int
    horizon: int
    min_date: pd.Timestamp
    max_date: pd.Timestamp
    est_start: pd.Timestamp
    est_end: pd.Timestamp
    x_frequency: InstanceOf[Frequency]
    y_frequency: InstanceOf[Frequency]

    class Config:
        arbitrary_types_allowed = True

    @property
    def nobs(self) -> int:
        return len(self.est_ydate)

    @property
    def n_forecast(self) -> int:
        return len(self.out_ydate)

    @property
    def is_single(self) -> bool:
        """True for results built against a reference date grid only."""
        return self.est_y is None

    def to_frame(self, sample: Literal["est", "out"] = "est") -> pd.DataFrame:
        """Flatten one sample into a DataFrame indexed by target date.

        Columns are ``y`` (full variant only), ``y_lag1 .. y_lag{y_lag}`` and
        ``x_lag0 .. x_lag{x_lag - 1}``, where ``x_lag0`` is the most recent
        high-frequency observation in each window.
        """
        if sample not in ("est", "out"):
            raise ValueError(f"sample must be 'est' or 'out', got '{sample}'")

        columns: dict[str, Any] = {}
        y = getattr(self, f"{sample}_y")
        lag_y = getattr(self, f"{sample}_lag_y")
        x = getattr(self, f"{sample}_x")

        if y is not None:
            columns["y"] = y
        if lag_y is not None:
            for m in range(lag_y.shape[1]):
                columns[f"y_lag{m + 1}"] = lag_y[:, m]
        for j in range(x.shape[1]):
            columns[f"x_lag{j}"] = x[:, j]

        index = pd.DatetimeIndex(getattr(self, f"{sample}_ydate"), name="date")
        return pd.DataFrame(columns, index=index)
