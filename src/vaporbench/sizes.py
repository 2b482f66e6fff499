"""Aggregate size measurement of build output directories.

Compressed size is the sum of each file gzipped on its own, not the size
of one stream over all files.  Published history depends on this, so the
compression level matches the zlib default used when it was recorded.
Symbolic links and other non-regular files are not counted.
"""

from __future__ import annotations

import gzip
import os
from collections.abc import Iterator
from pathlib import Path

# zlib's Z_DEFAULT_COMPRESSION level.
GZIP_LEVEL = 6


def iter_files(directory: Path) -> Iterator[Path]:
    """Yield every regular file under *directory*, depth first, in name order."""
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from iter_files(Path(entry.path))
        elif entry.is_file(follow_symlinks=False):
            yield Path(entry.path)


def gzip_size(data: bytes) -> int:
    """Return the length of *data* after gzip compression."""
    return len(gzip.compress(data, compresslevel=GZIP_LEVEL, mtime=0))


def raw_size(directory: Path) -> int:
    """Total size in bytes of all files under *directory*."""
    return sum(path.stat().st_size for path in iter_files(directory))


def compressed_size(directory: Path) -> int:
    """Total gzipped size in bytes of all files under *directory*."""
    return sum(gzip_size(path.read_bytes()) for path in iter_files(directory))
