"""Rewriting of the example sources between the Vapor and Classic variants.

The sources are authored in Vapor mode.  Producing the Classic variant
replaces the entry module with a ``createApp`` bootstrap and drops the
``vapor`` attribute from each component's ``<script setup>`` tag.  The
rewrite is textual: only the first ``<script setup ...>`` opening tag of
a file is touched, and only one ``vapor`` attribute is removed from it.

All files are read and written as bytes so that restoring a snapshot
reproduces the original content exactly, line endings included.
"""

from __future__ import annotations

import re
from pathlib import Path

from vaporbench.logging import get_logger

log = get_logger("transform")

VAPOR = "vapor"
CLASSIC = "classic"
VARIANTS = (VAPOR, CLASSIC)

CLASSIC_ENTRY_TEMPLATE = "\n".join(
    [
        "import './style.css'",
        "import { createApp } from 'vue'",
        "import App from './App.vue'",
        "",
        "// Classic Vue runtime build used for comparisons.",
        "createApp(App).mount('#app')",
        "",
    ]
)

_SCRIPT_SETUP_RE = re.compile(r"<script\s+setup[^>]*?>")
_VAPOR_ATTR_RE = re.compile(r"\s+vapor(?=\s|>)")

SourceSnapshot = dict[str, bytes]


def strip_vapor_attribute(source: str) -> str:
    """Remove the ``vapor`` attribute from the first ``<script setup>`` tag.

    ``<script setup vapor>`` becomes ``<script setup>``.  Text outside
    that tag is never modified, and a source without a matching tag is
    returned unchanged.
    """
    return _SCRIPT_SETUP_RE.sub(
        lambda m: _VAPOR_ATTR_RE.sub("", m.group(0), count=1),
        source,
        count=1,
    )


def capture_sources(root: Path, tracked_files: list[str]) -> SourceSnapshot:
    """Read the exact bytes of every tracked file.

    Args:
        root: Project root the tracked paths are relative to.
        tracked_files: Relative paths of the files to snapshot.

    Returns:
        Mapping of relative path to original file content.

    Raises:
        OSError: If a tracked file cannot be read.
    """
    snapshot: SourceSnapshot = {}
    for rel in tracked_files:
        snapshot[rel] = (root / rel).read_bytes()
    log.debug("Captured %d tracked source file(s)", len(snapshot))
    return snapshot


def restore_sources(root: Path, snapshot: SourceSnapshot) -> None:
    """Write every file in *snapshot* back to disk, changed or not."""
    for rel, content in snapshot.items():
        (root / rel).write_bytes(content)
    log.debug("Restored %d tracked source file(s)", len(snapshot))


def apply_classic_transforms(
    root: Path,
    entry_file: str,
    component_files: list[str],
) -> None:
    """Rewrite the sources in place to build with the classic runtime.

    Always call :func:`restore_sources` afterwards.
    """
    (root / entry_file).write_bytes(CLASSIC_ENTRY_TEMPLATE.encode("utf-8"))
    for rel in component_files:
        path = root / rel
        source = path.read_bytes().decode("utf-8")
        path.write_bytes(strip_vapor_attribute(source).encode("utf-8"))
    log.debug("Applied classic transforms to %d file(s)", 1 + len(component_files))


def apply_variant(
    root: Path,
    variant: str,
    snapshot: SourceSnapshot,
    *,
    entry_file: str,
    component_files: list[str],
) -> None:
    """Put the tracked sources into the state for *variant*.

    The Vapor variant is the authored state, so it is produced by
    restoring *snapshot*.

    Raises:
        ValueError: If *variant* is not ``"vapor"`` or ``"classic"``.
    """
    if variant == VAPOR:
        restore_sources(root, snapshot)
    elif variant == CLASSIC:
        apply_classic_transforms(root, entry_file, component_files)
    else:
        raise ValueError(f"Unknown variant: {variant!r} (expected one of {', '.join(VARIANTS)})")
