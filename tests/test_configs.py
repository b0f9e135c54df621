"""Tests for configuration modules."""

import tempfile
from datetime import date
from pathlib import Path

import pandas as pd
import pytest
import yaml

from mfalign.core.configs.alignment.config import (
    AlignmentConfig,
    SeriesSource,
    create_example_config,
    create_example_data,
    get_alignment_configurations,
    load_dates,
    load_series,
)


def _project(temp_dir: str) -> Path:
    """Lay out configs/alignment and data the way `mfalign init` does."""
    root = Path(temp_dir)
    config_dir = root / "configs" / "alignment"
    config_dir.mkdir(parents=True)
    create_example_config(str(config_dir))
    create_example_data(str(root / "data"))
    return config_dir


class TestAlignmentConfig:
    """Test AlignmentConfig functionality."""

    def test_alignment_config_creation(self):
        """Test creating an AlignmentConfig object."""
        config = AlignmentConfig(
            name="test_config",
            low_frequency=SeriesSource(path="gdp.csv", value_column="gdp"),
            high_frequency=SeriesSource(path="payrolls.csv", value_column="payrolls"),
            x_lag="3m",
            y_lag=2,
            horizon=1,
            est_start="1990-01-01",
        )

        assert config.name == "test_config"
        assert config.variant == "full"
        assert config.est_start == date(1990, 1, 1)
        assert config.est_end is None
        assert config.low_frequency.date_column == "date"

    def test_invalid_lag_rejected(self):
        """Test malformed symbolic lags fail validation."""
        with pytest.raises(ValueError):
            AlignmentConfig(
                name="bad",
                low_frequency=SeriesSource(path="gdp.csv"),
                high_frequency=SeriesSource(path="payrolls.csv"),
                x_lag="3w",
            )

    def test_invalid_variant_rejected(self):
        with pytest.raises(ValueError):
            AlignmentConfig(
                name="bad",
                variant="double",
                low_frequency=SeriesSource(path="gdp.csv"),
                high_frequency=SeriesSource(path="payrolls.csv"),
                x_lag=3,
            )

    def test_yaml_round_trip(self):
        """Test saving and loading a configuration."""
        config = AlignmentConfig(
            name="nowcast",
            variant="single",
            low_frequency=SeriesSource(path="gdp.csv"),
            high_frequency=SeriesSource(path="spreads.csv", value_column="spread"),
            x_lag="1q",
            horizon="-1m",
            est_end=date(2005, 12, 1),
        )
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "nested" / "nowcast.yaml"
            config.to_yaml(str(path))

            with open(path) as f:
                raw = yaml.safe_load(f)
            loaded = AlignmentConfig.from_yaml(str(path))

        assert raw["est_end"] == "2005-12-01"
        assert loaded == config


class TestConfigDirectory:
    """Test loading configurations from a directory."""

    def test_create_example_config(self):
        """Test creating example configuration."""
        with tempfile.TemporaryDirectory() as temp_dir:
            create_example_config(temp_dir)

            config_file = Path(temp_dir) / "default.yaml"
            assert config_file.exists()

            with open(config_file) as f:
                config_data = yaml.safe_load(f)

            assert config_data["name"] == "default"
            assert config_data["x_lag"] == "3q"
            assert "low_frequency" in config_data

    def test_get_alignment_configurations(self):
        """Test loading alignment configurations from directory."""
        with tempfile.TemporaryDirectory() as temp_dir:
            create_example_config(temp_dir)

            configs = get_alignment_configurations(temp_dir)

            assert len(configs) == 1
            assert configs[0].name == "default"

    def test_default_when_directory_empty(self):
        """Test the default configuration is used when no files exist."""
        with tempfile.TemporaryDirectory() as temp_dir:
            config_dir = Path(temp_dir) / "missing"
            configs = get_alignment_configurations(str(config_dir))

            assert config_dir.exists()
            assert [c.name for c in configs] == ["default"]

    def test_named_configuration(self):
        """Test selecting one configuration by name."""
        with tempfile.TemporaryDirectory() as temp_dir:
            create_example_config(temp_dir)

            assert len(get_alignment_configurations(temp_dir, "default")) == 1
            assert get_alignment_configurations(temp_dir, "absent") == []

    def test_invalid_file_skipped(self):
        """Test files that fail validation are skipped."""
        with tempfile.TemporaryDirectory() as temp_dir:
            create_example_config(temp_dir)
            with open(Path(temp_dir) / "broken.yaml", "w") as f:
                yaml.dump({"name": "broken", "x_lag": "3w"}, f)

            configs = get_alignment_configurations(temp_dir)

            assert [c.name for c in configs] == ["default"]


class TestLoadSeries:
    """Test reading series from CSV."""

    def test_load_series(self):
        """Test values are indexed by date and missing rows dropped."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "series.csv"
            pd.DataFrame(
                {
                    "when": ["2020-03-01", "2020-01-01", "2020-02-01"],
                    "level": [3.0, 1.0, None],
                }
            ).to_csv(path, index=False)

            source = SeriesSource(path="series.csv", date_column="when", value_column="level")
            series = load_series(source, base_dir=temp_dir)
            dates = load_dates(source, base_dir=temp_dir)

        assert list(series.index) == [pd.Timestamp("2020-01-01"), pd.Timestamp("2020-03-01")]
        assert list(series) == [1.0, 3.0]
        assert len(dates) == 3
        assert dates.is_monotonic_increasing

    def test_missing_column(self):
        """Test a clear error for an absent column."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "series.csv"
            pd.DataFrame({"date": ["2020-01-01"], "value": [1.0]}).to_csv(path, index=False)

            with pytest.raises(ValueError, match="gdp"):
                load_series(SeriesSource(path=str(path), value_column="gdp"))


class TestRun:
    """Test running configurations end to end."""

    def test_run_example_full(self):
        """Test the example configuration against the example data."""
        with tempfile.TemporaryDirectory() as temp_dir:
            config_dir = _project(temp_dir)
            config = AlignmentConfig.from_yaml(str(config_dir / "default.yaml"))

            result = config.run(base_dir=config_dir)

        # 3q of monthly payrolls is 9 months; quarterly GDP from 2000Q1 to 2019Q4
        assert result.x_lag == 9
        assert result.y_lag == 4
        assert result.horizon == 1
        assert result.min_date == pd.Timestamp("2001-01-01")
        assert result.nobs == 76
        assert result.n_forecast == 0
        assert result.est_x.shape == (76, 9)

    def test_run_example_single(self):
        """Test the reference-date variant only needs the low-frequency dates."""
        with tempfile.TemporaryDirectory() as temp_dir:
            config_dir = _project(temp_dir)
            config = AlignmentConfig.from_yaml(str(config_dir / "default.yaml"))
            config = config.model_copy(update={"variant": "single"})

            result = config.run(base_dir=config_dir)

        assert result.is_single
        assert result.min_date == pd.Timestamp("2000-10-01")
        assert result.nobs == 77
