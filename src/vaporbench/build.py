"""Invocation of the external build tool and capture of its output.

The build tool always writes to a fixed output directory.  Each variant
build starts from a clean output directory and is then moved to its own
artifact directory, so the two builds can never overlap.
"""

from __future__ import annotations

import shlex
import shutil
import subprocess
from pathlib import Path

from vaporbench.logging import get_logger

log = get_logger("build")

MODE_BENCHMARK = "benchmark"
MODE_INSPECT = "inspect"
MODES = (MODE_BENCHMARK, MODE_INSPECT)


def clean_dist(dist_dir: Path) -> None:
    """Remove the build output directory if it exists."""
    if dist_dir.exists():
        log.debug("Removing %s", dist_dir)
        shutil.rmtree(dist_dir)


def run_build(command: str, cwd: Path) -> None:
    """Run the build command with inherited standard streams.

    Raises:
        subprocess.CalledProcessError: If the build exits non-zero.
    """
    log.debug("Running: %s (in %s)", command, cwd)
    subprocess.run(shlex.split(command), cwd=str(cwd), check=True)


def capture_output(dist_dir: Path, target_dir: Path) -> Path:
    """Move the build output to *target_dir*, replacing any previous capture.

    Returns:
        The path of the captured artifact directory.
    """
    target_dir.parent.mkdir(parents=True, exist_ok=True)
    if target_dir.exists():
        shutil.rmtree(target_dir)
    dist_dir.rename(target_dir)
    log.debug("Captured %s -> %s", dist_dir, target_dir)
    return target_dir
