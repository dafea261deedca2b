"""Terminal display formatting for suite results.

Renders rankings as one-line summaries (``1. csv.reader (12.34 ms) / ...``)
and full per-suite reports with an aligned candidate table.
"""

from __future__ import annotations

from typing import Sequence

from parsebench.bench.results import (
    Failed,
    Measured,
    Measurement,
    RankedMeasurement,
    SuiteResult,
)
from parsebench.formatting import format_ms, format_section_header, format_table


def format_elapsed(measurement: Measurement) -> str:
    """Elapsed time, or a label saying why there is none."""
    elapsed = measurement.elapsed
    if isinstance(elapsed, Measured):
        return format_ms(elapsed.ms)
    return "invalid output" if elapsed.kind == "invalid" else "crashed"


def format_ranking(ranked: Sequence[RankedMeasurement]) -> str:
    """Render ``position. name (elapsed)`` entries joined by ``' / '``."""
    if not ranked:
        return "(no candidates)"
    return " / ".join(f"{r.position}. {r.name} ({format_elapsed(r.measurement)})" for r in ranked)


def _status(measurement: Measurement) -> str:
    elapsed = measurement.elapsed
    if isinstance(elapsed, Failed):
        return "INVALID" if elapsed.kind == "invalid" else "CRASH"
    return "ok"


def format_suite_report(result: SuiteResult) -> str:
    """Format one suite run for display.

    Shows the candidates in banded-rank order with both positions, then
    the two ranking lines, failure details and skipped candidates.
    """
    config = result.config
    lines: list[str] = [format_section_header(result.name)]
    lines.append(
        f"  {config.cycles} cycles + 1 warm-up, tolerance {format_ms(config.tolerance, 0)}"
    )
    lines.append("")

    strict_pos = {r.name: r.position for r in result.rankings.strict}
    rows = [
        [
            str(r.position),
            str(strict_pos.get(r.name, "")),
            r.name,
            format_elapsed(r.measurement),
            _status(r.measurement),
        ]
        for r in result.rankings.banded
    ]
    if rows:
        lines.append(
            format_table(
                ["Rank", "Strict", "Candidate", "Elapsed", "Status"],
                rows,
                alignments=["r", "r", "l", "r", "l"],
            )
        )
        lines.append("")

    lines.append(f"  Ranking:        {format_ranking(result.rankings.banded)}")
    lines.append(f"  Strict ranking: {format_ranking(result.rankings.strict)}")

    if result.failures:
        lines.append("")
        lines.append("  Failures:")
        for m in result.measurements:
            if isinstance(m.elapsed, Failed):
                lines.append(f"    {m.name}: {m.elapsed.reason}")

    if result.skipped:
        lines.append("")
        lines.append(f"  Skipped: {', '.join(result.skipped)}")

    return "\n".join(lines)


def format_run_report(results: Sequence[SuiteResult]) -> str:
    """Format several suite runs, separated by blank lines."""
    return "\n\n".join(format_suite_report(r) for r in results)
