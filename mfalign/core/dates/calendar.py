"""Calendar utilities: date vectors, epoch offsets, unit arithmetic and date matching."""

import logging
from enum import IntEnum
from typing import Any

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Origin of the numeric date representation, in days.
EPOCH = pd.Timestamp("1970-01-01")

DATE_VECTOR_COLUMNS = ["year", "month", "day", "hour", "minute", "second"]

TRADING_DAYS_PER_YEAR = 264
TRADING_DAYS_PER_QUARTER = 66
TRADING_DAYS_PER_MONTH = 22
TRADING_HOURS_PER_DAY = 8

_ELAPSED_UNIT_SECONDS = {
    "secs": 1.0,
    "mins": 60.0,
    "hours": 3600.0,
    "days": 86400.0,
    "weeks": 7 * 86400.0,
}


class Unit(IntEnum):
    """Calendar units of a date vector, ordered from coarsest to finest."""

    YEAR = 1
    MONTH = 2
    DAY = 3
    HOUR = 4
    MINUTE = 5
    SECOND = 6

    @property
    def label(self) -> str:
        return f"{self.name.lower()}(s)"

    @property
    def column(self) -> int:
        """Column of this unit in a vectorized date matrix."""
        return self.value - 1

    @property
    def wraparound(self) -> int:
        """Correction added to a negative modal difference of this unit."""
        return _WRAPAROUND[self]

    @property
    def trading_days(self) -> float:
        """Length of one unit in trading days."""
        return _TRADING_DAYS[self]


_WRAPAROUND = {
    Unit.YEAR: 0,
    Unit.MONTH: 12,
    Unit.DAY: 30,
    Unit.HOUR: 24,
    Unit.MINUTE: 60,
    Unit.SECOND: 60,
}

_TRADING_DAYS = {
    Unit.YEAR: TRADING_DAYS_PER_YEAR,
    Unit.MONTH: TRADING_DAYS_PER_MONTH,
    Unit.DAY: 1.0,
    Unit.HOUR: 1.0 / TRADING_HOURS_PER_DAY,
    Unit.MINUTE: 1.0 / TRADING_HOURS_PER_DAY / 60,
    Unit.SECOND: 1.0 / TRADING_HOURS_PER_DAY / 60 / 60,
}


def as_datetime_index(dates: Any) -> pd.DatetimeIndex:
    """Convert any date-like sequence to a timezone-naive DatetimeIndex."""
    index = pd.DatetimeIndex(pd.to_datetime(dates))
    if index.tz is not None:
        index = index.tz_convert("UTC").tz_localize(None)
    return index


def vectorize_dates(dates: Any) -> np.ndarray:
    """Split dates into an ``n x 6`` matrix of [year, month, day, hour, minute, second]."""
    index = as_datetime_index(dates)
    return np.column_stack(
        [
            np.asarray(index.year, dtype=np.int64),
            np.asarray(index.month, dtype=np.int64),
            np.asarray(index.day, dtype=np.int64),
            np.asarray(index.hour, dtype=np.int64),
            np.asarray(index.minute, dtype=np.int64),
            np.asarray(index.second, dtype=np.int64),
        ]
    ).reshape(len(index), len(DATE_VECTOR_COLUMNS))


def devectorize_dates(date_matrix: np.ndarray) -> pd.DatetimeIndex:
    """Rebuild dates from an ``n x 6`` date vector matrix."""
    frame = pd.DataFrame(np.asarray(date_matrix), columns=DATE_VECTOR_COLUMNS)
    return pd.DatetimeIndex(pd.to_datetime(frame))


def to_epoch_days(dates: Any, origin: pd.Timestamp = EPOCH) -> np.ndarray:
    """Numeric representation of dates as (fractional) days since ``origin``."""
    index = as_datetime_index(dates)
    return np.asarray((index - origin) / pd.Timedelta(days=1), dtype=float)


def from_epoch_days(days: Any, origin: pd.Timestamp = EPOCH) -> pd.DatetimeIndex:
    """Inverse of :func:`to_epoch_days`."""
    offsets = pd.to_timedelta(np.asarray(days, dtype=float), unit="D")
    return pd.DatetimeIndex(origin + offsets)


def shift_date(date: Any, amount: float, unit: Unit) -> pd.Timestamp:
    """Move ``date`` by ``amount`` units, rolling over into coarser units.

    Year and month shifts keep the day of month, clipped to the length of the
    target month.
    """
    ts = pd.Timestamp(date)
    if unit == Unit.YEAR:
        return ts + pd.DateOffset(years=int(round(amount)))
    if unit == Unit.MONTH:
        return ts + pd.DateOffset(months=int(round(amount)))
    if unit == Unit.DAY:
        return ts + pd.Timedelta(days=amount)
    if unit == Unit.HOUR:
        return ts + pd.Timedelta(hours=amount)
    if unit == Unit.MINUTE:
        return ts + pd.Timedelta(minutes=amount)
    return ts + pd.Timedelta(seconds=amount)


def elapsed_time(time1: Any, time2: Any, units: str = "auto") -> tuple[np.ndarray, str]:
    """Element-wise ``time1 - time2`` expressed in ``units``.

    Args:
        time1: Later timestamps
        time2: Earlier timestamps, same length as ``time1``
        units: One of "auto", "secs", "mins", "hours", "days", "weeks". With
            "auto" the unit is chosen from the smallest absolute difference.

    Returns:
        Tuple of (differences, unit name)
    """
    if units != "auto" and units not in _ELAPSED_UNIT_SECONDS:
        raise ValueError(
            f"Unknown units '{units}', expected one of "
            f"{['auto', *_ELAPSED_UNIT_SECONDS]}"
        )

    seconds = np.asarray(
        (as_datetime_index(time1) - as_datetime_index(time2)).total_seconds(),
        dtype=float,
    )

    if units == "auto":
        finite = np.abs(seconds[np.isfinite(seconds)])
        smallest = finite.min() if finite.size else np.nan
        if not np.isfinite(smallest) or smallest < 60:
            units = "secs"
        elif smallest < 3600:
            units = "mins"
        elif smallest < 86400:
            units = "hours"
        else:
            units = "days"

    return seconds / _ELAPSED_UNIT_SECONDS[units], units


def month_begin(dates: Any) -> pd.Timestamp | pd.DatetimeIndex:
    """First day of the month of each date."""
    if np.ndim(dates) == 0:
        return month_begin([dates])[0]
    index = as_datetime_index(dates)
    return index.to_period("M").to_timestamp(how="start")


def month_end(dates: Any) -> pd.Timestamp | pd.DatetimeIndex:
    """Last day of the month of each date."""
    if np.ndim(dates) == 0:
        return month_end([dates])[0]
    index = as_datetime_index(dates)
    return index.to_period("M").to_timestamp(how="end").normalize()


def match_dates(
    dates: Any, reference: Any, max_steps: int = 4
) -> pd.DatetimeIndex:
    """Snap dates onto a reference grid.

    Each date already present in ``reference`` is kept. Otherwise the date is
    moved back one day at a time, at most ``max_steps`` times, and replaced by
    the first earlier date found in ``reference``. Dates with no match within
    ``max_steps`` days are returned unchanged.

    Args:
        dates: Dates to snap
        reference: Reference date grid
        max_steps: Maximum number of days to search backward

    Returns:
        DatetimeIndex of matched dates, same length as ``dates``
    """
    index = as_datetime_index(dates)
    grid = set(as_datetime_index(reference))
    one_day = pd.Timedelta(days=1)

    matched = []
    n_unmatched = 0
    for date in index:
        if date in grid:
            matched.append(date)
            continue

        candidate = date
        for _ in range(max_steps):
            candidate = candidate - one_day
            if candidate in grid:
                matched.append(candidate)
                break
        else:
            matched.append(date)
            n_unmatched += 1

    if n_unmatched:
        logger.debug(
            f"{n_unmatched} of {len(index)} dates had no reference date within "
            f"{max_steps} days and were left unchanged"
        )

    return pd.DatetimeIndex(matched)
