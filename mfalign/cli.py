"""Command line interface for mfalign."""

from pathlib import Path

import typer
import yaml
from rich.console import Console

from mfalign.core.configs.alignment.config import (
    AlignmentConfig,
    SeriesSource,
    create_example_config,
    create_example_data,
    load_dates,
)
from mfalign.core.frequency.detector import detect_frequency
from mfalign.core.logger.logger import get_logger

app = typer.Typer(
    help="mfalign - mixed-frequency time series alignment for MIDAS regressions"
)
console = Console()


def _setup_logging(log_level: str) -> None:
    get_logger("mfalign", level=log_level, rich=True)


@app.command()
def init(
    project_name: str = typer.Argument(..., help="Name of the project to initialize"),
    output_dir: Path = typer.Option(
        Path.cwd(), help="Output directory for the project"
    ),
    with_data: bool = typer.Option(
        True, help="Write synthetic example data for the example configuration"
    ),
):
    """Initialize a new alignment project with an example configuration."""
    _setup_logging("WARNING")
    project_path = output_dir / project_name
    project_path.mkdir(parents=True, exist_ok=True)

    (project_path / "configs" / "alignment").mkdir(parents=True, exist_ok=True)
    (project_path / "data").mkdir(parents=True, exist_ok=True)
    (project_path / "results").mkdir(parents=True, exist_ok=True)

    create_example_config(str(project_path / "configs" / "alignment"))
    if with_data:
        create_example_data(str(project_path / "data"))

    console.print(
        f"✅ Project '{project_name}' initialized successfully at {project_path}"
    )
    console.print("📁 Directory structure created")
    console.print("⚙️  Example configuration generated")
    console.print("Project initialized successfully")


@app.command()
def frequency(
    csv_path: Path = typer.Argument(..., help="CSV file with a date column"),
    date_column: str = typer.Option("date", help="Name of the date column"),
):
    """Detect the sampling frequency of the dates in a CSV file."""
    if not csv_path.exists():
        console.print(f"❌ File not found: {csv_path}")
        raise typer.Exit(1)

    try:
        dates = load_dates(SeriesSource(path=str(csv_path), date_column=date_column))
        detected = detect_frequency(dates)
    except ValueError as e:
        console.print(f"❌ Frequency detection failed: {e}")
        raise typer.Exit(1)

    console.print(
        f"Frequency: {detected} (period={detected.period:g}, unit={detected.unit.name})"
    )


@app.command()
def align(
    config_path: Path = typer.Argument(..., help="Path to alignment configuration file"),
    output_dir: Path = typer.Option(Path("results"), help="Output directory"),
    log_level: str = typer.Option("INFO", help="Logging level"),
):
    """Run an alignment configuration and write the design matrices as CSV."""
    _setup_logging(log_level)
    if not config_path.exists():
        console.print(f"❌ Configuration file not found: {config_path}")
        raise typer.Exit(1)

    try:
        config = AlignmentConfig.from_yaml(str(config_path))
        result = config.run(base_dir=config_path.parent)
    except (ValueError, TypeError, OSError, yaml.YAMLError) as e:
        console.print(f"❌ Alignment failed: {e}")
        raise typer.Exit(1)

    output_dir.mkdir(parents=True, exist_ok=True)
    est_path = output_dir / f"{config.name}_est.csv"
    out_path = output_dir / f"{config.name}_out.csv"
    result.to_frame("est").to_csv(est_path)
    result.to_frame("out").to_csv(out_path)

    console.print(
        f"✅ Aligned {result.nobs} estimation and {result.n_forecast} "
        f"out-of-sample rows (x_lag={result.x_lag}, y_lag={result.y_lag}, "
        f"horizon={result.horizon})"
    )
    console.print(f"📋 Estimation sample written to {est_path}")
    console.print(f"📋 Out-of-sample rows written to {out_path}")


# Create validate subcommand group
validate_app = typer.Typer(help="Validate configuration files")
app.add_typer(validate_app, name="validate")


@validate_app.command("config")
def validate_config(
    config_path: Path = typer.Argument(..., help="Path to alignment configuration file"),
):
    """Validate an alignment configuration file."""
    if not config_path.exists():
        console.print(f"❌ Configuration file not found: {config_path}")
        raise typer.Exit(1)

    try:
        config = AlignmentConfig.from_yaml(str(config_path))
        console.print(f"✅ Alignment configuration is valid: {config.name}")

    except Exception as e:
        console.print(f"❌ Validation failed: {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    from mfalign import __version__

    console.print(f"mfalign version {__version__}")


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
