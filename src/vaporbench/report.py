"""Markdown rendering of a benchmark run and its recent history.

The report is a pure function of the current entry and the history; the
caller decides where it is written.
"""

from __future__ import annotations

from datetime import datetime

from vaporbench.build import MODE_BENCHMARK, MODE_INSPECT
from vaporbench.formatting import format_bytes, format_kb, format_ratio, format_signed_kb
from vaporbench.history import BenchmarkEntry, BenchmarkHistory, VariantSize

# Changes in Vapor gzip size within this many bytes count as stable.
TREND_THRESHOLD_BYTES = 100

# Number of recent benchmarks shown in the history table.
HISTORY_DISPLAY_LIMIT = 10

TREND_IMPROVING = "\u2193 Improving"
TREND_REGRESSING = "\u2191 Regressing"
TREND_STABLE = "\u2192 Stable"
TREND_NONE = "\u2014"


def _parse_timestamp(timestamp: str) -> datetime | None:
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return None


def _format_datetime(timestamp: str) -> str:
    parsed = _parse_timestamp(timestamp)
    if parsed is None:
        return timestamp
    return parsed.strftime("%Y-%m-%d %H:%M:%S %Z").rstrip()


def _format_date(timestamp: str) -> str:
    parsed = _parse_timestamp(timestamp)
    if parsed is None:
        return timestamp
    return parsed.strftime("%Y-%m-%d")


def format_delta_label(delta: int) -> str:
    """Describe a gzipped size delta: ``'+1.2 KB (Vapor larger)'``."""
    if delta == 0:
        return "0 KB (equal)"
    if delta > 0:
        return f"+{format_kb(delta)} (Vapor larger)"
    return f"{format_kb(abs(delta))} (Vapor smaller)"


def trend_label(current: int, previous: int) -> str:
    """Classify the change from *previous* to *current* gzipped Vapor size."""
    change = current - previous
    if change < -TREND_THRESHOLD_BYTES:
        return TREND_IMPROVING
    if change > TREND_THRESHOLD_BYTES:
        return TREND_REGRESSING
    return TREND_STABLE


def recent_benchmarks(
    history: BenchmarkHistory,
    limit: int = HISTORY_DISPLAY_LIMIT,
) -> list[BenchmarkEntry]:
    """Return the last *limit* benchmark-mode entries, newest first."""
    benchmarks = [b for b in history.benchmarks if b.mode == MODE_BENCHMARK]
    return list(reversed(benchmarks[-limit:])) if limit > 0 else []


def _size_row(label: str, size: VariantSize) -> str:
    return (
        f"| {label} "
        f"| {format_kb(size.raw)} ({format_bytes(size.raw)} bytes) "
        f"| {format_kb(size.gzipped)} ({format_bytes(size.gzipped)} bytes) "
        f"| {format_ratio(size.raw, size.gzipped)} |"
    )


def _history_lines(recent: list[BenchmarkEntry]) -> list[str]:
    lines = [
        "| Date | Vue Version | Vapor (gzipped) | Classic (gzipped) | Delta | Trend |",
        "|------|-------------|-----------------|-------------------|-------|-------|",
    ]
    for idx, entry in enumerate(recent):
        # The oldest row in the window has nothing to compare against.
        trend = TREND_NONE
        if idx < len(recent) - 1:
            trend = trend_label(entry.vapor.gzipped, recent[idx + 1].vapor.gzipped)
        lines.append(
            f"| {_format_date(entry.timestamp)} | {entry.subject_version} "
            f"| {format_kb(entry.vapor.gzipped)} | {format_kb(entry.classic.gzipped)} "
            f"| {format_signed_kb(entry.delta.gzipped)} | {trend} |"
        )
    return lines


def render_report(current: BenchmarkEntry, history: BenchmarkHistory) -> str:
    """Render the markdown report for *current* with a recent-history table.

    The history table is omitted for inspection runs.
    """
    mode_label = "Inspection (readable)" if current.mode == MODE_INSPECT else "Production benchmark"

    lines = [
        "# Build Benchmark Report",
        "",
        f"**Generated**: {_format_datetime(current.timestamp)}",
        f"**Vue Version**: {current.subject_version}",
        f"**Mode**: {mode_label}",
        "",
        "## Current Build",
        "",
        "| Build | Raw Size | Gzipped | Compression Ratio |",
        "|-------|----------|---------|-------------------|",
        _size_row("Vapor", current.vapor),
        _size_row("Classic", current.classic),
        "",
        f"**Delta (Vapor - Classic)**: {format_delta_label(current.delta.gzipped)}",
    ]

    if current.mode != MODE_INSPECT and history.benchmarks:
        lines.extend(["", "## Recent History", ""])
        recent = recent_benchmarks(history)
        if recent:
            lines.extend(_history_lines(recent))

    lines.extend(
        [
            "",
            "## Commands",
            "",
            "```bash",
            "vaporbench run            # Run production benchmark",
            "vaporbench run --inspect  # Generate readable build for inspection",
            "vaporbench backfill       # Benchmark every unrecorded release",
            "```",
            "",
        ]
    )
    return "\n".join(lines)
