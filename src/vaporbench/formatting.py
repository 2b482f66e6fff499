"""Shared text formatting helpers for vaporbench.

Byte sizes are shown in kilobytes with one decimal place (1 KB = 1024
bytes), which is the unit used by the published reports.
"""

from __future__ import annotations


def format_kb(size: int) -> str:
    """Format a byte count as kilobytes: ``'21.5 KB'``."""
    return f"{size / 1024:.1f} KB"


def format_bytes(size: int) -> str:
    """Format a byte count with thousands separators: ``'58,000'``."""
    return f"{size:,}"


def format_ratio(raw: int, gzipped: int) -> str:
    """Format a compression ratio: ``'2.76x'``. Returns ``'N/A'`` if *gzipped* is 0."""
    if gzipped == 0:
        return "N/A"
    return f"{raw / gzipped:.2f}x"


def format_signed_kb(delta: int) -> str:
    """Format a size delta, prefixing positive values with ``+``."""
    if delta > 0:
        return f"+{format_kb(delta)}"
    return format_kb(delta)


def format_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    alignments: list[str] | None = None,
    indent: int = 2,
) -> str:
    """Format a list of rows as an aligned text table.

    Column widths are computed from content. Columns marked ``'r'`` in
    *alignments* are right-aligned, all others left-aligned.

    Args:
        headers: Column header strings.
        rows: List of rows, each a list of cell strings.
        alignments: Per-column alignment: ``'l'`` or ``'r'``.
        indent: Number of leading spaces per line.

    Returns:
        The formatted table as a string.
    """
    if not headers:
        return ""

    ncols = len(headers)
    aligns = list(alignments or [])
    while len(aligns) < ncols:
        aligns.append("l")

    proc_rows: list[list[str]] = []
    for row in rows:
        padded = list(row) + [""] * (ncols - len(row))
        proc_rows.append(padded[:ncols])

    widths = [len(h) for h in headers]
    for row in proc_rows:
        for ci, cell in enumerate(row):
            widths[ci] = max(widths[ci], len(cell))

    prefix = " " * indent

    def _format_line(cells: list[str]) -> str:
        parts = [
            cells[i].rjust(widths[i]) if aligns[i] == "r" else cells[i].ljust(widths[i])
            for i in range(ncols)
        ]
        return (prefix + "  ".join(parts)).rstrip()

    lines = [_format_line(list(headers))]
    lines.append(prefix + "  ".join("\u2500" * w for w in widths))
    for row in proc_rows:
        lines.append(_format_line(row))
    return "\n".join(lines)
