"""Command-line interface for vaporbench.

Subcommands:
    vaporbench run        Build both variants, measure, record, report
    vaporbench backfill   Benchmark every unrecorded release of the subject library
    vaporbench history    Show the recorded history
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import click

from vaporbench import __version__
from vaporbench.config import BenchConfig, load_config, validate_config
from vaporbench.formatting import format_kb, format_signed_kb, format_table
from vaporbench.logging import setup_logging


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """vaporbench — Track Vue Vapor bundle size against the classic runtime."""


def _load_or_exit(root: Path, config_path: Path | None) -> BenchConfig:
    """Resolve and validate the configuration, exiting on errors."""
    try:
        config = load_config(root, config_path)
    except (OSError, ValueError, TypeError) as exc:
        click.echo(f"Error: invalid configuration: {exc}", err=True)
        raise SystemExit(1) from exc

    problems = validate_config(config)
    for problem in problems:
        prefix = "Warning" if problem.severity == "warning" else "Error"
        click.echo(f"{prefix}: {problem.message}", err=True)
    if any(p.severity == "error" for p in problems):
        raise SystemExit(1)
    return config


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@main.command("run")
@click.option(
    "--inspect",
    is_flag=True,
    default=False,
    help="Produce readable, unminified builds and skip recording history.",
)
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Project root containing package.json and the example sources.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML profile (default: ROOT/vaporbench.yaml if present).",
)
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None)
def run(
    inspect: bool,
    root: Path,
    config_path: Path | None,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Build the Vapor and Classic variants and compare their sizes.

    \b
    Examples:
        # Production benchmark, recorded in history
        vaporbench run

        # Readable builds for manual inspection
        vaporbench run --inspect
    """
    from vaporbench.benchmark import run_benchmark
    from vaporbench.build import MODE_BENCHMARK, MODE_INSPECT

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    config = _load_or_exit(root, config_path)

    try:
        entry = run_benchmark(config, MODE_INSPECT if inspect else MODE_BENCHMARK)
    except subprocess.CalledProcessError as exc:
        click.echo(f"Error: build command failed with exit code {exc.returncode}", err=True)
        raise SystemExit(1) from exc
    except (OSError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904

    click.echo(
        f"Vapor {format_kb(entry.vapor.gzipped)} vs Classic {format_kb(entry.classic.gzipped)} "
        f"gzipped ({format_signed_kb(entry.delta.gzipped)})"
    )


# ---------------------------------------------------------------------------
# backfill
# ---------------------------------------------------------------------------


@main.command("backfill")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Project root containing package.json and the example sources.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML profile (default: ROOT/vaporbench.yaml if present).",
)
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None)
def backfill(
    root: Path,
    config_path: Path | None,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Benchmark every release of the tracked family missing from history."""
    from vaporbench.backfill import BackfillError, run_backfill

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    config = _load_or_exit(root, config_path)

    try:
        summary = run_backfill(config)
    except BackfillError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except subprocess.CalledProcessError as exc:
        click.echo(f"Error: install command failed with exit code {exc.returncode}", err=True)
        raise SystemExit(1) from exc
    except OSError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        click.echo("\nBackfill interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904

    click.echo(f"Succeeded: {len(summary.succeeded)}")
    click.echo(f"Failed:    {len(summary.failed)}")
    if summary.failed:
        click.echo(f"  {', '.join(summary.failed)}")


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------


@main.command("history")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Project root the history file path is relative to.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML profile (default: ROOT/vaporbench.yaml if present).",
)
@click.option("--json", "as_json", is_flag=True, help="Print the history as JSON.")
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None)
def history(
    root: Path,
    config_path: Path | None,
    as_json: bool,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Show recorded benchmarks, oldest version first."""
    from vaporbench.history import read_history

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    try:
        config = load_config(root, config_path)
    except (OSError, ValueError, TypeError) as exc:
        click.echo(f"Error: invalid configuration: {exc}", err=True)
        raise SystemExit(1) from exc

    recorded = read_history(config.history_path)
    if as_json:
        click.echo(json.dumps(recorded.to_dict(), indent=2))
        return
    if not recorded.benchmarks:
        click.echo("No benchmarks recorded.")
        return

    rows = [
        [
            b.subject_version,
            b.timestamp[:10],
            b.mode,
            format_kb(b.vapor.gzipped),
            format_kb(b.classic.gzipped),
            format_signed_kb(b.delta.gzipped),
        ]
        for b in recorded.benchmarks
    ]
    click.echo(
        format_table(
            ["Version", "Date", "Mode", "Vapor (gz)", "Classic (gz)", "Delta"],
            rows,
            alignments=["l", "l", "l", "r", "r", "r"],
        )
    )
