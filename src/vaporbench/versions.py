"""Semantic version parsing and ordering for subject-library releases.

Only the ``MAJOR.MINOR.PATCH[-TAG.N]`` shape used by the tracked release
family is understood, where ``TAG`` is one of ``alpha``, ``beta`` or
``rc``.  Anything else parses to the zero version, so malformed strings
sort together at the bottom instead of aborting a run.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Any, Callable

_VERSION_RE = re.compile(r"(\d+)\.(\d+)\.(\d+)(?:-(alpha|beta|rc)\.(\d+))?")

# Stable releases rank above every prerelease tier.
_PRERELEASE_RANK: dict[str, int] = {"alpha": 1, "beta": 2, "rc": 3}


@dataclass(frozen=True)
class ParsedVersion:
    """Numeric components of a version string."""

    major: int = 0
    minor: int = 0
    patch: int = 0
    prerelease: str | None = None  # "alpha" | "beta" | "rc" | None
    prerelease_num: int = 0


def parse_version(version: str) -> ParsedVersion:
    """Parse *version* into its components.

    Unparseable input returns ``ParsedVersion()`` (0.0.0, no prerelease).
    """
    m = _VERSION_RE.fullmatch(version)
    if not m:
        return ParsedVersion()
    return ParsedVersion(
        major=int(m.group(1)),
        minor=int(m.group(2)),
        patch=int(m.group(3)),
        prerelease=m.group(4),
        prerelease_num=int(m.group(5)) if m.group(5) else 0,
    )


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns -1 if *a* sorts before *b*, 1 if after, 0 if equal.  At equal
    ``major.minor.patch`` a stable release beats any prerelease; two
    prereleases compare by tier (alpha < beta < rc) and then by number.
    """
    va = parse_version(a)
    vb = parse_version(b)

    for x, y in ((va.major, vb.major), (va.minor, vb.minor), (va.patch, vb.patch)):
        if x != y:
            return _sign(x - y)

    if va.prerelease is None and vb.prerelease is not None:
        return 1
    if va.prerelease is not None and vb.prerelease is None:
        return -1

    if va.prerelease is not None and vb.prerelease is not None:
        rank_a = _PRERELEASE_RANK.get(va.prerelease, 0)
        rank_b = _PRERELEASE_RANK.get(vb.prerelease, 0)
        if rank_a != rank_b:
            return _sign(rank_a - rank_b)
        return _sign(va.prerelease_num - vb.prerelease_num)

    return 0


version_key: Callable[[str], Any] = functools.cmp_to_key(compare_versions)


def sort_versions(versions: list[str]) -> list[str]:
    """Return *versions* sorted ascending.  The sort is stable."""
    return sorted(versions, key=version_key)
