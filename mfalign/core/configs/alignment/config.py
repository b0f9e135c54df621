"""Alignment configuration for mixed-frequency data."""

import glob
import logging
import os
from datetime import date
from pathlib import Path
from typing import Literal

import numpy as np
import pandas as pd
import yaml
from pydantic import BaseModel, Field, field_validator

from mfalign.core.align.aligner import mixed_freq_data, mixed_freq_data_single
from mfalign.core.data.meta.dataset import AlignmentResult
from mfalign.core.frequency.lags import parse_lag

logger = logging.getLogger(__name__)


class SeriesSource(BaseModel):
    """Location of one series in a CSV file."""

    path: str
    date_column: str = "date"
    value_column: str = "value"


class AlignmentConfig(BaseModel):
    """Configuration of a single mixed-frequency alignment."""

    name: str
    variant: Literal["full", "single"] = Field(
        default="full",
        description="full: target values and self-lags; single: reference dates only",
    )
    low_frequency: SeriesSource
    high_frequency: SeriesSource

    x_lag: int | str
    y_lag: int | str = 1
    horizon: int | str = 0

    est_start: date | None = None
    est_end: date | None = None

    @field_validator("x_lag", "y_lag", "horizon")
    @classmethod
    def check_lag(cls, v):
        """Reject malformed symbolic lags at load time."""
        if isinstance(v, str):
            parse_lag(v)
        return v

    @classmethod
    def from_yaml(cls, file_path: str) -> "AlignmentConfig":
        """Load configuration from YAML file."""
        with open(file_path) as f:
            data = yaml.safe_load(f)
        return cls(**data)

    def to_yaml(self, file_path: str) -> None:
        """Save configuration to YAML file."""
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "w") as f:
            yaml.dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

    def run(self, base_dir: str | Path | None = None) -> AlignmentResult:
        """Load both series and align them.

        Args:
            base_dir: Directory that relative series paths are resolved against

        Returns:
            AlignmentResult of the configured variant
        """
        high = load_series(self.high_frequency, base_dir)

        if self.variant == "single":
            ref_dates = load_dates(self.low_frequency, base_dir)
            logger.info(
                f"Running alignment '{self.name}' (single): {len(ref_dates)} "
                f"reference dates and {len(high)} high-frequency rows"
            )
            return mixed_freq_data_single(
                ref_dates,
                high.to_numpy(),
                high.index,
                x_lag=self.x_lag,
                horizon=self.horizon,
                est_start=self.est_start,
                est_end=self.est_end,
            )

        low = load_series(self.low_frequency, base_dir)
        logger.info(
            f"Running alignment '{self.name}' (full): {len(low)} "
            f"low-frequency and {len(high)} high-frequency rows"
        )

        return mixed_freq_data(
            low.to_numpy(),
            low.index,
            high.to_numpy(),
            high.index,
            x_lag=self.x_lag,
            y_lag=self.y_lag,
            horizon=self.horizon,
            est_start=self.est_start,
            est_end=self.est_end,
        )


def _resolve_path(path: str, base_dir: str | Path | None) -> Path:
    resolved = Path(path)
    if base_dir is not None and not resolved.is_absolute():
        resolved = Path(base_dir) / resolved
    return resolved


def load_series(
    source: SeriesSource,
    base_dir: str | Path | None = None,
    dropna: bool = True,
) -> pd.Series:
    """Read one series from CSV as a float Series indexed by date.

    Args:
        source: Series location
        base_dir: Directory that a relative ``source.path`` is resolved against
        dropna: Drop rows with a missing value

    Returns:
        Series sorted by date
    """
    path = _resolve_path(source.path, base_dir)
    frame = pd.read_csv(path)
    missing = {source.date_column, source.value_column} - set(frame.columns)
    if missing:
        raise ValueError(f"Columns {sorted(missing)} not found in {path}")

    series = pd.Series(
        frame[source.value_column].to_numpy(dtype=float),
        index=pd.DatetimeIndex(pd.to_datetime(frame[source.date_column])),
        name=source.value_column,
    ).sort_index()
    if dropna:
        series = series[series.notna()]
    return series


def load_dates(source: SeriesSource, base_dir: str | Path | None = None) -> pd.DatetimeIndex:
    """Read the date column of a CSV source, sorted and without missing dates."""
    path = _resolve_path(source.path, base_dir)
    frame = pd.read_csv(path)
    if source.date_column not in frame.columns:
        raise ValueError(f"Column '{source.date_column}' not found in {path}")

    dates = pd.DatetimeIndex(pd.to_datetime(frame[source.date_column]))
    return dates[~dates.isna()].sort_values()


def get_alignment_configurations(
    config_dir: str, config_name: str | None = None
) -> list[AlignmentConfig]:
    """Get alignment configurations from YAML files.

    Args:
        config_dir: Directory containing configuration files
        config_name: Optional name of a specific configuration to load
                   If None, all configurations are loaded

    Returns:
        List of AlignmentConfig objects
    """
    if not os.path.exists(config_dir):
        os.makedirs(config_dir)
        logger.info(f"Created alignment configuration directory: {config_dir}")

    all_config_files = sorted(glob.glob(os.path.join(config_dir, "*.yaml")))

    if not all_config_files:
        logger.info("No alignment configuration files found. Using default configuration.")
        return [_get_default_config()]

    if config_name is not None:
        target_file = os.path.join(config_dir, f"{config_name}.yaml")
        if os.path.exists(target_file):
            all_config_files = [target_file]
        else:
            logger.warning(f"Configuration '{config_name}' not found.")
            return []

    configs = []
    for config_file in all_config_files:
        try:
            configs.append(AlignmentConfig.from_yaml(config_file))
            logger.info(
                f"Loaded alignment configuration from {os.path.basename(config_file)}"
            )
        except Exception as e:
            logger.error(f"Error loading configuration from {config_file}: {str(e)}")

    return configs


def _get_default_config() -> AlignmentConfig:
    """Get a default alignment configuration."""
    return AlignmentConfig(
        name="default",
        variant="full",
        low_frequency=SeriesSource(
            path="../../data/gdp.csv", date_column="date", value_column="gdp"
        ),
        high_frequency=SeriesSource(
            path="../../data/payrolls.csv", date_column="date", value_column="payrolls"
        ),
        x_lag="3q",
        y_lag=4,
        horizon=1,
    )


def create_example_config(config_dir: str) -> None:
    """Create an example alignment configuration YAML file."""
    example_path = os.path.join(config_dir, "default.yaml")

    if os.path.exists(example_path):
        logger.info(f"Example configuration already exists at {example_path}")
        return

    _get_default_config().to_yaml(example_path)
    logger.info(f"Created example alignment configuration at {example_path}")


def create_example_data(data_dir: str, seed: int = 42) -> None:
    """Write synthetic quarterly GDP growth and monthly payroll growth CSVs."""
    Path(data_dir).mkdir(parents=True, exist_ok=True)
    rng = np.random.default_rng(seed)

    monthly = pd.date_range("2000-01-01", "2019-12-01", freq="MS")
    payrolls = rng.normal(0.1, 0.2, len(monthly))
    pd.DataFrame({"date": monthly.strftime("%Y-%m-%d"), "payrolls": payrolls}).to_csv(
        os.path.join(data_dir, "payrolls.csv"), index=False
    )

    quarterly = pd.date_range("2000-01-01", "2019-10-01", freq="QS")
    quarterly_payrolls = (
        pd.Series(payrolls, index=monthly).resample("QS").sum().reindex(quarterly)
    )
    gdp = 2.0 + 3.0 * quarterly_payrolls.to_numpy() + rng.normal(0, 0.5, len(quarterly))
    pd.DataFrame({"date": quarterly.strftime("%Y-%m-%d"), "gdp": gdp}).to_csv(
        os.path.join(data_dir, "gdp.csv"), index=False
    )
    logger.info(f"Created example data in {data_dir}")

