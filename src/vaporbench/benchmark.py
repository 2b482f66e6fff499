"""Benchmark execution: build both variants, measure them, record the result.

Sequence:
1. Snapshot the tracked sources.
2. Build the Vapor sources as authored and capture the output.
3. Rewrite the sources to the Classic variant, build, capture.
4. Measure raw and gzipped sizes of both captures.
5. Record the entry in history (benchmark mode only) and write the report.

Once the Classic rewrite has started, the sources are restored and the
Vapor output rebuilt no matter how the run ends, so the working tree and
``dist`` are left as they were found.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from vaporbench.build import (
    MODE_BENCHMARK,
    MODE_INSPECT,
    MODES,
    capture_output,
    clean_dist,
    run_build,
)
from vaporbench.config import BenchConfig
from vaporbench.formatting import format_kb
from vaporbench.history import BenchmarkEntry, VariantSize, read_history, write_history
from vaporbench.logging import get_logger
from vaporbench.npm import read_subject_version
from vaporbench.report import render_report
from vaporbench.sizes import compressed_size, raw_size
from vaporbench.transform import (
    CLASSIC,
    SourceSnapshot,
    apply_variant,
    capture_sources,
    restore_sources,
)

log = get_logger("benchmark")


def utc_timestamp() -> str:
    """Current time as ISO-8601 UTC with millisecond precision: ``...T12:00:00.000Z``."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def measure(directory: Path) -> VariantSize:
    """Measure the raw and gzipped size of a captured build."""
    return VariantSize(raw=raw_size(directory), gzipped=compressed_size(directory))


def build_variant(config: BenchConfig, mode: str, target_dir: Path) -> Path:
    """Clean, build with the command for *mode*, and capture to *target_dir*."""
    clean_dist(config.dist_path)
    run_build(config.build_command_for(mode), config.root)
    return capture_output(config.dist_path, target_dir)


def _restore_and_rebuild(config: BenchConfig, mode: str, snapshot: SourceSnapshot) -> None:
    log.info("Restoring Vapor sources and regenerating %s...", config.dist_dir)
    restore_sources(config.root, snapshot)
    clean_dist(config.dist_path)
    run_build(config.build_command_for(mode), config.root)


def write_report(config: BenchConfig, entry: BenchmarkEntry) -> Path:
    """Render the report against the current history and write it to disk."""
    markdown = render_report(entry, read_history(config.history_path))
    report_path = config.report_path
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(markdown, encoding="utf-8")
    log.info("Report saved to %s", config.relative(report_path))
    return report_path


def run_benchmark(config: BenchConfig, mode: str = MODE_BENCHMARK) -> BenchmarkEntry:
    """Run one full Vapor vs Classic comparison.

    Args:
        config: Resolved configuration.
        mode: ``"benchmark"`` records the result in history;
            ``"inspect"`` produces readable builds and records nothing.

    Returns:
        The entry describing this run.

    Raises:
        subprocess.CalledProcessError: If a build command fails.
        OSError: If a tracked source or build output cannot be accessed.
        ValueError: If *mode* is not a known mode.
    """
    if mode not in MODES:
        raise ValueError(f"Unknown mode: {mode!r} (expected one of {', '.join(MODES)})")

    log.info("Running in %s mode...", mode)
    snapshot = capture_sources(config.root, config.tracked_files)
    classic_applied = False

    try:
        log.info("Building Vapor output...")
        build_variant(config, mode, config.vapor_dir)

        log.info("Building classic runtime output...")
        classic_applied = True
        apply_variant(
            config.root,
            CLASSIC,
            snapshot,
            entry_file=config.entry_file,
            component_files=config.component_files,
        )
        build_variant(config, mode, config.classic_dir)

        vapor = measure(config.vapor_dir)
        classic = measure(config.classic_dir)

        log.info("Size summary (%s)", mode)
        log.info("- Vapor output:   %s (gzip %s)", format_kb(vapor.raw), format_kb(vapor.gzipped))
        log.info(
            "- Classic output: %s (gzip %s)", format_kb(classic.raw), format_kb(classic.gzipped)
        )

        entry = BenchmarkEntry.create(
            timestamp=utc_timestamp(),
            mode=mode,
            vapor=vapor,
            classic=classic,
            subject_version=read_subject_version(config),
        )

        if mode != MODE_INSPECT:
            write_history(config.history_path, entry)
        write_report(config, entry)
    finally:
        if classic_applied:
            _restore_and_rebuild(config, mode, snapshot)

    log.info(
        "Artifacts available under %s and %s",
        config.relative(config.vapor_dir),
        config.relative(config.classic_dir),
    )
    if mode != MODE_INSPECT:
        log.info("History updated in %s", config.relative(config.history_path))
    return entry
