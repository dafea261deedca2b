"""Shared text formatting helpers for parsebench.

Provides functions for formatting elapsed times, aligned tables and
section headers used by the reporter and the CLI.
"""

from __future__ import annotations


def format_ms(ms: float, precision: int = 2) -> str:
    """Format milliseconds with adaptive units: ``'12.34 ms'``, ``'1.50 s'``."""
    if ms >= 1000:
        return f"{ms / 1000:.{precision}f} s"
    return f"{ms:.{precision}f} ms"


def format_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    alignments: list[str] | None = None,
    indent: int = 2,
) -> str:
    """Format a list of rows as an aligned text table.

    Column widths are computed from content.  Columns marked ``'r'`` in
    *alignments* are right-aligned, all others left-aligned.

    Args:
        headers: Column header strings.
        rows: List of rows, each a list of cell strings.  Short rows are
            padded with empty cells.
        alignments: Per-column alignment: ``'l'`` or ``'r'``.
        indent: Number of leading spaces per line.
    """
    if not headers:
        return ""

    ncols = len(headers)
    aligns = list(alignments or [])
    aligns += ["l"] * (ncols - len(aligns))

    cells = [(list(row) + [""] * ncols)[:ncols] for row in rows]
    widths = [max([len(headers[i])] + [len(r[i]) for r in cells]) for i in range(ncols)]

    def _line(values: list[str]) -> str:
        parts = [
            v.rjust(widths[i]) if aligns[i] == "r" else v.ljust(widths[i])
            for i, v in enumerate(values)
        ]
        return (" " * indent + "  ".join(parts)).rstrip()

    lines = [_line(headers), " " * indent + "\u2500" * (sum(widths) + 2 * (ncols - 1))]
    lines.extend(_line(r) for r in cells)
    return "\n".join(lines)


def format_section_header(title: str, width: int = 72) -> str:
    """Format a section header: ``'\u2500\u2500\u2500 Title \u2500\u2500...'``."""
    prefix = "\u2500\u2500\u2500 "
    suffix_len = width - len(prefix) - len(title) - 1
    return prefix + title + " " + "\u2500" * max(0, suffix_len)
