"""
Flood Analytics — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (load CSV, build reports, interactive shell).
  5. Report result to stdout.

Install and run::

    pip install -e .
    flood-analytics --help
    flood-analytics validate-config
    flood-analytics load --file data/projects.csv
    flood-analytics generate-reports --file data/projects.csv
    flood-analytics shell
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Callable, Optional

import typer

from flood_analytics.analytics.contractor import MIN_PROJECTS
from flood_analytics.session import AnalyticsSession

app = typer.Typer(
    name="flood-analytics",
    help="Flood-mitigation project analytics — regional efficiency and contractor ranking reports.",
    add_completion=False,
)

MENU = """Select an option:
[1] Load the file
[2] Generate Reports
[3] Exit"""

_LOAD_CHOICES = {"1", "load"}
_REPORT_CHOICES = {"2", "generate reports", "generate", "reports"}
_EXIT_CHOICES = {"3", "exit", "quit"}


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from flood_analytics.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from flood_analytics.utils.logging import configure_logging
    configure_logging(config.logging, debug=config.debug)


def _generate_and_print(
    session: AnalyticsSession,
    echo: Callable[[str], None],
    top_n: Optional[int] = None,
    output_dir: Optional[Path] = None,
) -> bool:
    """Build both reports, write the files, then print both tables.

    Returns ``False`` (and writes nothing) when the store is empty.
    Propagates ``OSError`` from the file writes.
    """
    from flood_analytics.reporting.formatters import (
        format_contractor_ranking_table,
        format_regional_summary_table,
    )

    bundle = session.build_reports(top_n=top_n)
    if bundle is None:
        echo("No data loaded. Please load a file first.")
        return False

    echo("Generating reports...")
    paths = session.write_reports(bundle, output_dir=output_dir)

    echo(format_regional_summary_table(bundle.regional))
    echo("")
    echo(f"Full table exported to {paths.regional}")
    echo(format_contractor_ranking_table(bundle.contractors, bundle.top_n, MIN_PROJECTS))
    echo("")
    echo(f"Full table exported to {paths.contractor}")
    if paths.summary is not None:
        echo(f"Summary exported to {paths.summary}")
    return True


def run_shell(
    session: AnalyticsSession,
    prompt: Callable[[str], str] = typer.prompt,
    echo: Callable[[str], None] = typer.echo,
) -> None:
    """Interactive menu loop: load, generate reports, exit.

    A failing command prints an ``[ERROR]`` line and returns to the menu.
    End of input (Ctrl-D / Ctrl-C) exits like ``[3]``.
    """
    from flood_analytics.reporting.formatters import format_load_summary

    while True:
        echo(MENU)
        try:
            choice = prompt("Enter Choice").strip().lower()
        except (typer.Abort, EOFError):
            echo("")
            break

        if choice in _EXIT_CHOICES:
            echo("Goodbye.")
            break

        if choice in _LOAD_CHOICES:
            try:
                filename = prompt("Enter CSV filename").strip()
            except (typer.Abort, EOFError):
                echo("")
                break
            try:
                result = session.load(Path(filename))
                echo(format_load_summary(result))
            except (OSError, ValueError, csv.Error) as exc:
                echo(f"[ERROR] Could not load '{filename}': {exc}")

        elif choice in _REPORT_CHOICES:
            try:
                _generate_and_print(session, echo)
            except OSError as exc:
                echo(f"[ERROR] Could not write reports: {exc}")

        else:
            echo("Invalid choice. Please try again.")

        echo("")


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Default input:    {config.data.default_input_file}")
    typer.echo(f"  Accumulate loads: {config.data.accumulate_loads}")
    typer.echo(f"  Output dir:       {config.reports.output_dir}")
    typer.echo(f"  Contractor top-N: {config.reports.top_n}")
    typer.echo(f"  JSON summary:     {config.reports.write_json_summary}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("load")
def load(
    csv_file: Optional[str] = typer.Option(
        None,
        "--file",
        "-f",
        help="Project CSV to validate. Defaults to config.data.default_input_file.",
    ),
    show_errors: int = typer.Option(
        10,
        "--show-errors",
        help="How many rejected rows to list (0 to hide).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Load and validate a project CSV, then print row counts.

    Nothing is written; use ``generate-reports`` or ``shell`` to produce reports.
    """
    from flood_analytics.reporting.formatters import format_load_summary

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    path = Path(csv_file) if csv_file else Path(config.data.default_input_file)
    session = AnalyticsSession(config)
    try:
        result = session.load(path)
    except (OSError, ValueError, csv.Error) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_load_summary(result, show_errors=show_errors))
    typer.echo(f"  Skipped (outside funding years): {result.skipped_out_of_range}")
    typer.echo("[OK] Load complete.")


@app.command("generate-reports")
def generate_reports(
    csv_files: Optional[list[str]] = typer.Option(
        None,
        "--file",
        "-f",
        help=(
            "Project CSV to load. Repeat to combine several files into one "
            "snapshot. Defaults to config.data.default_input_file."
        ),
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for report files. Defaults to config.reports.output_dir.",
    ),
    top_n: Optional[int] = typer.Option(
        None,
        "--top-n",
        min=1,
        help="Contractor ranking cap. Defaults to config.reports.top_n.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Load one or more CSVs and write both reports.

    \b
    Outputs (overwritten on every run):
      report_1_regional_summary.csv   — Regional efficiency summary
      report_2_contractor_ranking.csv — Contractor performance ranking
    """
    from flood_analytics.reporting.formatters import format_load_summary

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    paths = [Path(p) for p in csv_files] if csv_files else [Path(config.data.default_input_file)]
    session = AnalyticsSession(config)

    for i, path in enumerate(paths):
        try:
            result = session.load(path, append=i > 0)
        except (OSError, ValueError, csv.Error) as exc:
            typer.echo(f"[ERROR] {exc}", err=True)
            raise typer.Exit(code=1)
        typer.echo(format_load_summary(result))

    try:
        ok = _generate_and_print(
            session,
            typer.echo,
            top_n=top_n,
            output_dir=Path(output_dir) if output_dir else None,
        )
    except OSError as exc:
        typer.echo(f"[ERROR] Could not write reports: {exc}", err=True)
        raise typer.Exit(code=1)

    if not ok:
        raise typer.Exit(code=1)
    typer.echo("")
    typer.echo("[OK] Reports generated.")


@app.command("shell")
def shell(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Interactive menu: load a CSV, generate reports, repeat.

    Each load replaces the loaded records unless ``data.accumulate_loads``
    is set in the config.
    """
    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    run_shell(AnalyticsSession(config))


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
