"""Exceptions and warnings raised by the mixed-frequency alignment core."""


class AlignmentError(ValueError):
    """Base class for fatal alignment errors."""


class LagParseError(AlignmentError):
    """A symbolic lag description such as ``"3m"`` could not be parsed."""


class NegativeLagError(AlignmentError):
    """A lag normalized to a negative number of periods."""


class InsufficientDataError(AlignmentError):
    """Too few observations to detect a frequency or support the requested lags."""


class AlignmentWarning(UserWarning):
    """Base class for recoverable alignment conditions."""


class ClampWarning(AlignmentWarning):
    """Estimation bounds were moved into the feasible date range."""


class TruncationWarning(AlignmentWarning):
    """Rows were dropped because their lag window ran past the available data."""
