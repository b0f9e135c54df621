"""
mfalign - Mixed-frequency time series alignment.

This package turns a low-frequency target series and a high-frequency
covariate series into lag matrices for MIDAS-style regressions, inferring
the sampling frequency of each series from its dates.
"""

__version__ = "0.1.0"
__author__ = "Collective AI"
__email__ = "info@collective.ai"

# Core imports for easy access
from mfalign.core.align.aligner import (
    align,
    align_single,
    mixed_freq_data,
    mixed_freq_data_single,
)
from mfalign.core.align.design import design_matrix
from mfalign.core.data.meta.dataset import AlignmentResult, TimeSeriesData
from mfalign.core.dates.calendar import (
    Unit,
    match_dates,
    month_begin,
    month_end,
    vectorize_dates,
)
from mfalign.core.errors import (
    AlignmentError,
    AlignmentWarning,
    ClampWarning,
    InsufficientDataError,
    LagParseError,
    NegativeLagError,
    TruncationWarning,
)
from mfalign.core.frequency.detector import Frequency, detect_frequency, mode
from mfalign.core.frequency.lags import normalize_lag

__all__ = [
    "align",
    "align_single",
    "mixed_freq_data",
    "mixed_freq_data_single",
    "design_matrix",
    "AlignmentResult",
    "TimeSeriesData",
    "Unit",
    "Frequency",
    "detect_frequency",
    "mode",
    "normalize_lag",
    "vectorize_dates",
    "match_dates",
    "month_begin",
    "month_end",
    "AlignmentError",
    "AlignmentWarning",
    "ClampWarning",
    "InsufficientDataError",
    "LagParseError",
    "NegativeLagError",
    "TruncationWarning",
]
