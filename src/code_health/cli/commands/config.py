"""Configuration commands for the code-health CLI."""

from pathlib import Path

import typer

from ...config.defaults import DEFAULT_CONFIG_FILE
from ...config.thresholds import ThresholdConfig
from ..output import print_error, print_success


def init_config(
    path: Path = typer.Argument(
        Path(DEFAULT_CONFIG_FILE),
        help="Where to write the configuration file",
    ),
    force: bool = typer.Option(
        False, "--force", help="Overwrite an existing configuration file"
    ),
) -> None:
    """Write the default thresholds to a YAML file."""
    if path.exists() and not force:
        print_error(f"{path} already exists (use --force to overwrite)")
        raise typer.Exit(1)

    ThresholdConfig().save(path)
    print_success(f"Default configuration written to {path}")
