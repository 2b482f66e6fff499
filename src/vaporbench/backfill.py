"""Backfill of history for subject releases that were never benchmarked.

Lists the tracked release family from the registry, installs each
version missing from history (oldest first), runs a benchmark for it,
and finally reinstalls the newest release.  A failed benchmark is
recorded and skipped; a failed install stops the backfill, since the
project's dependency state is then unknown.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from vaporbench.benchmark import run_benchmark
from vaporbench.build import MODE_BENCHMARK
from vaporbench.config import BenchConfig
from vaporbench.history import read_history
from vaporbench.logging import get_logger
from vaporbench.npm import fetch_registry_metadata, install_version, published_versions
from vaporbench.versions import sort_versions

log = get_logger("backfill")

_RULE = "=" * 60


class BackfillError(Exception):
    """The backfill could not determine which versions to benchmark."""


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass
class BackfillResult:
    """Outcome of benchmarking one version."""

    version: str
    success: bool
    error: str | None = None


@dataclass
class BackfillSummary:
    """Aggregate outcome of a backfill run."""

    available: list[str] = field(default_factory=list)
    existing: set[str] = field(default_factory=set)
    results: list[BackfillResult] = field(default_factory=list)
    restored_version: str | None = None

    @property
    def missing(self) -> list[str]:
        return [v for v in self.available if v not in self.existing]

    @property
    def succeeded(self) -> list[str]:
        return [r.version for r in self.results if r.success]

    @property
    def failed(self) -> list[str]:
        return [r.version for r in self.results if not r.success]


# ---------------------------------------------------------------------------
# Version discovery
# ---------------------------------------------------------------------------


def discover_versions(config: BenchConfig) -> list[str]:
    """Return the published versions matching ``config.version_prefix``, ascending.

    Raises:
        BackfillError: If the registry cannot be queried.
    """
    log.info(
        "Fetching %s %s versions from the registry...",
        config.subject_package,
        config.version_prefix,
    )
    metadata = fetch_registry_metadata(
        config.subject_package,
        registry_url=config.registry_url,
        timeout=config.timeout,
    )
    if metadata is None:
        raise BackfillError(f"Could not fetch published versions of {config.subject_package}")
    matching = [v for v in published_versions(metadata) if v.startswith(config.version_prefix)]
    return sort_versions(matching)


def _benchmark_version(config: BenchConfig, version: str) -> BackfillResult:
    install_version(config, version)
    log.info("Running benchmark...")
    try:
        run_benchmark(config, MODE_BENCHMARK)
    except Exception as exc:  # noqa: BLE001
        log.error("Benchmark failed for %s: %s", version, exc)
        return BackfillResult(version=version, success=False, error=str(exc))
    return BackfillResult(version=version, success=True)


# ---------------------------------------------------------------------------
# Backfill
# ---------------------------------------------------------------------------


def run_backfill(config: BenchConfig) -> BackfillSummary:
    """Benchmark every discovered version that has no history entry.

    Raises:
        BackfillError: If the registry cannot be queried.
        subprocess.CalledProcessError: If installing a version fails.
    """
    summary = BackfillSummary()
    summary.available = discover_versions(config)
    log.info("Found %d version(s): %s", len(summary.available), ", ".join(summary.available))

    summary.existing = read_history(config.history_path).versions
    log.info(
        "Already benchmarked: %s",
        ", ".join(sort_versions(list(summary.existing))) if summary.existing else "none",
    )

    missing = summary.missing
    if not missing:
        log.info("All versions already benchmarked!")
        return summary

    log.info("Missing versions to benchmark: %s", ", ".join(missing))
    log.info("Starting backfill of %d version(s)...", len(missing))

    for i, version in enumerate(missing, start=1):
        log.info(_RULE)
        log.info("[%d/%d] Benchmarking %s %s", i, len(missing), config.subject_package, version)
        log.info(_RULE)
        result = _benchmark_version(config, version)
        summary.results.append(result)
        if result.success:
            log.info("Completed %s %s", config.subject_package, version)
        else:
            log.warning("Skipping %s %s (build failed)", config.subject_package, version)

    log.info(
        "Benchmarked %d/%d version(s) successfully.",
        len(summary.succeeded),
        len(summary.results),
    )
    if summary.failed:
        log.warning("Failed versions: %s", ", ".join(summary.failed))

    latest = summary.available[-1]
    log.info(_RULE)
    log.info("Restoring to latest version: %s", latest)
    log.info(_RULE)
    install_version(config, latest)
    summary.restored_version = latest

    log.info("Backfill complete! History file: %s", config.relative(config.history_path))
    return summary
