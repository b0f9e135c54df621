"""Normalization of lag and horizon specifications to native periods."""

import logging
import math
import numbers
from typing import Any

from mfalign.core.dates.calendar import (
    TRADING_DAYS_PER_MONTH,
    TRADING_DAYS_PER_QUARTER,
    TRADING_DAYS_PER_YEAR,
    TRADING_HOURS_PER_DAY,
)
from mfalign.core.errors import LagParseError
from mfalign.core.frequency.detector import Frequency

logger = logging.getLogger(__name__)

# Trading days covered by one unit of each lag suffix
SUFFIX_TRADING_DAYS = {
    "y": TRADING_DAYS_PER_YEAR,
    "q": TRADING_DAYS_PER_QUARTER,
    "m": TRADING_DAYS_PER_MONTH,
    "d": 1.0,
    "h": 1.0 / TRADING_HOURS_PER_DAY,
    "s": 1.0 / (TRADING_HOURS_PER_DAY * 60 * 60),
}


def parse_lag(spec: str) -> float:
    """Convert a symbolic lag such as ``"3m"`` or ``"1q"`` into trading days."""
    text = spec.strip()
    suffix = text[-1:].lower()
    if suffix not in SUFFIX_TRADING_DAYS:
        raise LagParseError(
            f"The description of lags cannot be recognized: '{spec}'. "
            f"The format should be 3m, 1q, etc. with a suffix in "
            f"{list(SUFFIX_TRADING_DAYS)}"
        )

    try:
        multiplier = float(text[:-1])
    except ValueError as e:
        raise LagParseError(
            f"The description of lags cannot be recognized: '{spec}'. "
            "The format should be 3m, 1q, etc."
        ) from e

    if not math.isfinite(multiplier) or "_" in text:
        raise LagParseError(
            f"The description of lags cannot be recognized: '{spec}'. "
            "The multiplier must be a finite number"
        )

    return multiplier * SUFFIX_TRADING_DAYS[suffix]


def normalize_lag(spec: Any, frequency: Frequency) -> int:
    """Express a lag specification as a number of periods at ``frequency``.

    Integers are taken to be in native periods already and are returned
    unchanged. Strings are converted with the trading day conventions
    (264 days a year, 66 a quarter, 22 a month, 8 hours a day) and rounded
    to the nearest whole number of periods.

    Args:
        spec: Integer number of periods or a string like "3m", "1q", "10d"
        frequency: Frequency of the series the lag applies to

    Returns:
        Number of periods

    Raises:
        LagParseError: If the specification cannot be interpreted
    """
    if isinstance(spec, bool):
        raise LagParseError(f"Lag must be an integer or a string, got {spec!r}")
    if isinstance(spec, numbers.Integral):
        return int(spec)
    if isinstance(spec, numbers.Real):
        if float(spec).is_integer():
            return int(spec)
        raise LagParseError(f"Numeric lags must be whole periods, got {spec!r}")
    if not isinstance(spec, str):
        raise LagParseError(f"Lag must be an integer or a string, got {spec!r}")

    trading_days = parse_lag(spec)
    periods = round(trading_days / (frequency.unit.trading_days * frequency.period))
    logger.debug(f"Lag '{spec}' at frequency {frequency} is {periods} period(s)")
    return int(periods)


def normalize_lags(
    y_lag: Any,
    x_lag: Any,
    horizon: Any,
    y_frequency: Frequency,
    x_frequency: Frequency,
) -> tuple[int, int, int]:
    """Normalize the target lag, covariate lag and horizon together.

    ``y_lag`` is measured against the low-frequency series, ``x_lag`` and
    ``horizon`` against the high-frequency series.
    """
    return (
        normalize_lag(y_lag, y_frequency),
        normalize_lag(x_lag, x_frequency),
        normalize_lag(horizon, x_frequency),
    )
