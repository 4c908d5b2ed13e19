"""Analyze command for the code-health CLI."""

import sys
from pathlib import Path

import typer
from loguru import logger

from ...analysis.reporters import ConsoleReporter, JsonReporter
from ...config.defaults import DEFAULT_CONFIG_FILE, DEFAULT_JSON_REPORT, REPORT_FORMATS
from ...config.thresholds import ThresholdConfig
from ...core.engine import analyze_project
from ...core.exceptions import CodeHealthError, InputError
from ..output import console, print_error, print_info, print_success, print_warning

# Exit code when the quality gate fails
EXIT_CRITICAL_FINDINGS = 2


def setup_logging(verbose: bool, quiet: bool) -> None:
    """Route loguru output to stderr at the requested level."""
    level = "DEBUG" if verbose else "ERROR" if quiet else "WARNING"
    logger.remove()
    logger.add(sys.stderr, level=level)


def _load_config(target: Path, config_path: Path | None) -> ThresholdConfig:
    if config_path is not None:
        if not config_path.exists():
            raise InputError(
                f"Config file not found: {config_path}",
                context={"path": str(config_path)},
            )
        return ThresholdConfig.load(config_path)
    return ThresholdConfig.load(target / DEFAULT_CONFIG_FILE)


def analyze(
    target: Path = typer.Argument(
        ...,
        help="Root directory of the Go project to analyze",
    ),
    output_format: str = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: console, json or both",
        rich_help_panel="📊 Display Options",
    ),
    output: Path = typer.Option(
        Path(DEFAULT_JSON_REPORT),
        "--output",
        "-o",
        help="JSON report file (json/both formats)",
        rich_help_panel="📊 Display Options",
    ),
    exclude: str | None = typer.Option(
        None,
        "--exclude",
        "-e",
        help="Comma-separated directories or globs to skip",
        rich_help_panel="🔍 Filters",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Threshold configuration YAML (default: TARGET/{DEFAULT_CONFIG_FILE})",
        rich_help_panel="🔧 Global Options",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        help="Parallel package workers (overrides config)",
        min=1,
        rich_help_panel="⚡ Performance Options",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Abort the run after this many seconds",
        min=0.0,
        rich_help_panel="⚡ Performance Options",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
) -> None:
    """🩺 Analyze the health of a Go code base.

    Computes cohesion (LCOM4), cyclomatic complexity, package coupling,
    private-method islands and field-usage clusters, then reports
    diagnostics such as God Objects and Unstable Foundations.

    [bold cyan]Examples:[/bold cyan]

    [green]Console report:[/green]
        $ code-health analyze ./myproject

    [green]JSON report next to the console output:[/green]
        $ code-health analyze ./myproject --format both -o health.json

    [green]Skip generated code:[/green]
        $ code-health analyze . --exclude gen,internal/mocks
    """
    setup_logging(verbose, quiet)

    if output_format not in REPORT_FORMATS:
        print_error(
            f"Unknown format '{output_format}' (expected one of: "
            f"{', '.join(REPORT_FORMATS)})"
        )
        raise typer.Exit(1)

    try:
        config = _load_config(target, config_path)
        if workers is not None:
            config.max_workers = workers

        exclude_dirs = [p.strip() for p in (exclude or "").split(",") if p.strip()]
        report = analyze_project(
            target, exclude_dirs=exclude_dirs, config=config, timeout=timeout
        )

        if output_format in ("console", "both"):
            ConsoleReporter(console).render(report)
        if output_format in ("json", "both"):
            written = JsonReporter().write(report, output)
            print_success(f"JSON report written to {written}")

    except InputError as e:
        print_error(str(e))
        raise typer.Exit(1)
    except CodeHealthError as e:
        logger.error(f"Analysis failed: {e}")
        print_error(f"Analysis failed: {e}")
        raise typer.Exit(1)

    if report.skipped_directories:
        print_warning(
            f"{len(report.skipped_directories)} directory(ies) skipped due to parse errors"
        )

    critical = report.findings_by_severity().get("Critical", 0)
    if config.fail_on_critical and critical:
        print_info(f"Quality gate failed: {critical} critical finding(s)")
        raise typer.Exit(EXIT_CRITICAL_FINDINGS)
