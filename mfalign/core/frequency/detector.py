"""Native sampling frequency detection from raw date sequences."""

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np

from mfalign.core.dates.calendar import (
    Unit,
    devectorize_dates,
    elapsed_time,
    vectorize_dates,
)
from mfalign.core.errors import InsufficientDataError

logger = logging.getLogger(__name__)

# Units checked with the modal difference, in cascade order. Anything finer
# than a minute falls back to the mean elapsed seconds.
_MODAL_UNITS = (Unit.YEAR, Unit.MONTH, Unit.DAY, Unit.HOUR, Unit.MINUTE)


@dataclass(frozen=True)
class Frequency:
    """Dominant gap between consecutive dates: ``period`` units of ``unit``.

    Frequency     period   unit
    yearly           1     YEAR
    semiannual       6     MONTH
    quarterly        3     MONTH
    monthly          1     MONTH
    biweekly        14     DAY
    weekly           7     DAY
    daily            1     DAY
    hourly           1     HOUR
    minutely         1     MINUTE
    """

    period: float
    unit: Unit

    def __post_init__(self):
        if not self.period > 0:
            raise ValueError(f"Frequency period must be positive, got {self.period}")
        object.__setattr__(self, "unit", Unit(self.unit))

    def __str__(self) -> str:
        return f"{self.period:g} {self.unit.label}"


def mode(data: Any) -> tuple[float, int]:
    """Most frequent value of a numeric sequence.

    Ties are broken in favour of the smallest value, i.e. the first run of
    maximal length in ascending sorted order.

    Args:
        data: Numeric sequence

    Returns:
        Tuple of (mode value, number of occurrences)
    """
    values = np.asarray(data).ravel()
    if values.size == 0:
        raise ValueError("Cannot compute the mode of an empty sequence")

    unique, counts = np.unique(values, return_counts=True)
    # argmax returns the first maximum, unique is sorted ascending
    best = int(np.argmax(counts))
    return unique[best].item(), int(counts[best])


def detect_frequency_from_vectors(date_matrix: np.ndarray) -> Frequency:
    """Infer the sampling frequency from an ``n x 6`` date vector matrix."""
    date_matrix = np.asarray(date_matrix)
    if date_matrix.ndim != 2 or date_matrix.shape[0] < 2:
        raise InsufficientDataError(
            "At least two dates are required to detect a sampling frequency"
        )

    date_diff = np.diff(date_matrix, axis=0)

    for unit in _MODAL_UNITS:
        mode_value, _ = mode(date_diff[:, unit.column])
        if mode_value < 0:
            mode_value += unit.wraparound
        if mode_value >= 1:
            return Frequency(period=int(mode_value), unit=unit)

    dates = devectorize_dates(date_matrix)
    elapsed, _ = elapsed_time(dates[1:], dates[:-1], units="secs")
    return Frequency(period=float(np.mean(elapsed)), unit=Unit.SECOND)


def detect_frequency(dates: Any) -> Frequency:
    """Infer the native sampling frequency of a date sequence.

    The modal difference between consecutive dates is checked unit by unit,
    from years down to minutes; the first unit with a modal step of at least
    one is the frequency. Negative modal steps are corrected for rollover into
    the next coarser unit (e.g. December to January is -11 months, i.e. +1).
    Sub-minute data is described by the mean number of elapsed seconds.

    Args:
        dates: Date-like sequence with at least two elements

    Returns:
        Detected Frequency
    """
    frequency = detect_frequency_from_vectors(vectorize_dates(dates))
    logger.debug(f"Detected frequency: {frequency}")
    return frequency
