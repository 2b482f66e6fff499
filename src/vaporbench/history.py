"""Benchmark entry data structures and the persisted history file.

Hierarchy::

    BenchmarkHistory
      → benchmarks: list[BenchmarkEntry]   (one per subject version, ascending)
        → vapor / classic: VariantSize
        → delta: VariantSize               (vapor − classic, may be negative)

The history file is pretty-printed JSON of the form
``{"benchmarks": [...]}``.  Key names follow the format already read by
the published report viewer, so the subject version is stored under
``vueVersion``.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from vaporbench.build import MODE_BENCHMARK
from vaporbench.logging import get_logger
from vaporbench.versions import version_key

log = get_logger("history")


# ---------------------------------------------------------------------------
# Entry-level data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VariantSize:
    """Raw and gzipped byte counts of one build (or a difference of two)."""

    raw: int
    gzipped: int

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {"raw": self.raw, "gzipped": self.gzipped}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VariantSize:
        """Deserialize from a dict."""
        return cls(raw=int(data["raw"]), gzipped=int(data["gzipped"]))

    def __sub__(self, other: VariantSize) -> VariantSize:
        return VariantSize(raw=self.raw - other.raw, gzipped=self.gzipped - other.gzipped)


@dataclass(frozen=True)
class BenchmarkEntry:
    """One measurement of both variants against a subject version."""

    timestamp: str  # ISO-8601, UTC
    mode: str  # "benchmark" | "inspect"
    vapor: VariantSize
    classic: VariantSize
    delta: VariantSize
    subject_version: str

    @classmethod
    def create(
        cls,
        *,
        timestamp: str,
        mode: str,
        vapor: VariantSize,
        classic: VariantSize,
        subject_version: str,
    ) -> BenchmarkEntry:
        """Build an entry, deriving ``delta`` as vapor minus classic."""
        return cls(
            timestamp=timestamp,
            mode=mode,
            vapor=vapor,
            classic=classic,
            delta=vapor - classic,
            subject_version=subject_version,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "timestamp": self.timestamp,
            "mode": self.mode,
            "vapor": self.vapor.to_dict(),
            "classic": self.classic.to_dict(),
            "delta": self.delta.to_dict(),
            "vueVersion": self.subject_version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BenchmarkEntry:
        """Deserialize from a dict, ignoring unknown fields.

        Raises:
            KeyError, TypeError, ValueError: If a required field is missing
                or has the wrong shape.
        """
        return cls(
            timestamp=str(data["timestamp"]),
            mode=str(data.get("mode", MODE_BENCHMARK)),
            vapor=VariantSize.from_dict(data["vapor"]),
            classic=VariantSize.from_dict(data["classic"]),
            delta=VariantSize.from_dict(data["delta"]),
            subject_version=str(data["vueVersion"]),
        )


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


@dataclass
class BenchmarkHistory:
    """All recorded entries, at most one per subject version."""

    benchmarks: list[BenchmarkEntry] = field(default_factory=list)

    @property
    def versions(self) -> set[str]:
        """Subject versions with a recorded entry."""
        return {b.subject_version for b in self.benchmarks}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {"benchmarks": [b.to_dict() for b in self.benchmarks]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BenchmarkHistory:
        """Deserialize from a dict, skipping malformed entries."""
        history = cls()
        raw_entries = data.get("benchmarks", [])
        if not isinstance(raw_entries, list):
            log.warning("History 'benchmarks' is not a list; ignoring it")
            return history
        for i, item in enumerate(raw_entries):
            try:
                history.benchmarks.append(BenchmarkEntry.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                log.warning("Skipping malformed history entry #%d: %s", i, exc)
        return history


# ---------------------------------------------------------------------------
# I/O functions
# ---------------------------------------------------------------------------


def _load_document(history_file: Path) -> dict[str, Any]:
    """Return the raw JSON object stored in *history_file*, or ``{}``."""
    try:
        data = json.loads(history_file.read_text(encoding="utf-8"))
    except FileNotFoundError:
        log.debug("No history file at %s", history_file)
        return {}
    except (OSError, ValueError) as exc:
        log.warning("Could not read history from %s: %s", history_file, exc)
        return {}

    if not isinstance(data, dict):
        log.warning("History file %s is not a JSON object; ignoring it", history_file)
        return {}
    return data


def _stored_version_key(item: Any) -> Any:
    version = item.get("vueVersion") if isinstance(item, dict) else None
    return version_key(str(version) if version is not None else "")


def _write_document(history_file: Path, data: dict[str, Any]) -> None:
    history_file.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(data, indent=2) + "\n"
    fd, tmp_path = tempfile.mkstemp(
        dir=history_file.parent, prefix=history_file.name + ".", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, history_file)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def read_history(history_file: Path) -> BenchmarkHistory:
    """Load the history file.

    Returns an empty history if the file is missing or cannot be parsed.
    """
    return BenchmarkHistory.from_dict(_load_document(history_file))


def save_history(history_file: Path, history: BenchmarkHistory) -> None:
    """Write *history* to disk, replacing the whole file.

    The content goes to a temporary sibling first and is then moved into
    place, so the history file is never left half-written.
    """
    _write_document(history_file, history.to_dict())
    log.debug("Wrote %d benchmark(s) to %s", len(history.benchmarks), history_file)


def write_history(history_file: Path, entry: BenchmarkEntry) -> BenchmarkHistory:
    """Record *entry*, replacing any existing entry for the same subject version.

    Stored entries for other versions are written back exactly as they
    were read, including ones this version of the tool cannot parse and
    any extra keys they carry.

    Returns:
        The history as written to disk.
    """
    data = _load_document(history_file)
    stored = data.get("benchmarks")
    if not isinstance(stored, list):
        stored = []
    kept = [
        item
        for item in stored
        if not (isinstance(item, dict) and item.get("vueVersion") == entry.subject_version)
    ]
    kept.append(entry.to_dict())
    kept.sort(key=_stored_version_key)
    data["benchmarks"] = kept

    _write_document(history_file, data)
    log.info("Recorded %s in %s", entry.subject_version, history_file)
    return BenchmarkHistory.from_dict(data)
