"""Assemble aligned lag blocks into a regression design matrix."""

from typing import Literal

import numpy as np

from mfalign.core.data.meta.dataset import AlignmentResult


def design_matrix(
    *results: AlignmentResult,
    include_y_lags: bool = True,
    sample: Literal["est", "out"] = "est",
) -> tuple[np.ndarray, np.ndarray | None, np.ndarray]:
    """Concatenate the lag blocks of one or more alignment results.

    The target self-lags of the first result (when present and requested)
    form group 0, followed by one group per high-frequency covariate, in the
    order given. All results must share the same target dates.

    Args:
        results: Alignment results for the same target, one per covariate
        include_y_lags: Whether to include the target self-lag block
        sample: "est" for the estimation sample, "out" for out-of-sample rows

    Returns:
        Tuple of (design matrix, target values or None, group index per column)
    """
    if not results:
        raise ValueError("At least one alignment result is required")
    if sample not in ("est", "out"):
        raise ValueError(f"sample must be 'est' or 'out', got '{sample}'")

    first = results[0]
    target_dates = getattr(first, f"{sample}_ydate")

    blocks: list[np.ndarray] = []
    groups: list[np.ndarray] = []

    lag_y = getattr(first, f"{sample}_lag_y")
    if include_y_lags and lag_y is not None and lag_y.shape[1] > 0:
        blocks.append(lag_y)
        groups.append(np.zeros(lag_y.shape[1], dtype=int))

    for result in results:
        dates = getattr(result, f"{sample}_ydate")
        if not np.array_equal(dates, target_dates):
            raise ValueError(
                "Alignment results have different target dates; align all "
                "covariates over the same estimation window"
            )
        x = getattr(result, f"{sample}_x")
        if x.shape[1] == 0:
            continue
        blocks.append(x)
        groups.append(np.full(x.shape[1], len(groups), dtype=int))

    if blocks:
        design = np.hstack(blocks)
        group_index = np.concatenate(groups)
    else:
        design = np.empty((len(target_dates), 0))
        group_index = np.empty(0, dtype=int)

    return design, getattr(first, f"{sample}_y"), group_index
