"""Export suite results to CSV, Markdown and JSON.

CSV format: one row per suite per candidate (long format), including
skipped candidates, suitable for loading into a spreadsheet or pandas.

Markdown format: one ranking table per suite, for READMEs and issues.
"""

from __future__ import annotations

import csv
import io
import json
from typing import Sequence

from parsebench.bench.display import format_elapsed
from parsebench.bench.results import Failed, SuiteResult

EXPORT_FORMATS = ("text", "markdown", "csv", "json")


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------


def export_csv(results: Sequence[SuiteResult]) -> str:
    """Export results as CSV.

    Columns:
        suite, rows, quotes, cycles, tolerance_ms, candidate, status,
        elapsed_ms, strict_position, banded_position, failure
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(
        [
            "suite",
            "rows",
            "quotes",
            "cycles",
            "tolerance_ms",
            "candidate",
            "status",
            "elapsed_ms",
            "strict_position",
            "banded_position",
            "failure",
        ]
    )

    for result in results:
        cfg = result.config
        prefix = [cfg.name, cfg.rows, cfg.quotes, cfg.cycles, cfg.tolerance]
        strict = {r.name: r.position for r in result.rankings.strict}
        for r in result.rankings.banded:
            elapsed = r.elapsed
            if isinstance(elapsed, Failed):
                status, ms, failure = elapsed.kind, "", elapsed.reason
            else:
                status, ms, failure = "ok", f"{elapsed.ms:.3f}", ""
            writer.writerow(
                prefix + [r.name, status, ms, strict.get(r.name, ""), r.position, failure]
            )
        for name in result.skipped:
            writer.writerow(prefix + [name, "skipped", "", "", "", ""])

    return output.getvalue()


# ---------------------------------------------------------------------------
# Markdown export
# ---------------------------------------------------------------------------


def export_markdown(results: Sequence[SuiteResult]) -> str:
    """Export results as Markdown: a heading and ranking table per suite."""
    lines: list[str] = ["# Parser ranking", ""]

    for result in results:
        cfg = result.config
        lines.append(f"## {cfg.name}")
        lines.append("")
        lines.append(
            f"{cfg.cycles} cycles + 1 warm-up; candidates within "
            f"{cfg.tolerance:g} ms of each other share a rank."
        )
        lines.append("")

        if not result.rankings.banded:
            lines.append("_No candidates ran._")
            lines.append("")
            continue

        strict = {r.name: r.position for r in result.rankings.strict}
        lines.append("| Rank | Strict | Candidate | Elapsed |")
        lines.append("|-----:|-------:|-----------|--------:|")
        for r in result.rankings.banded:
            lines.append(
                f"| {r.position} | {strict.get(r.name, '')} | `{r.name}` "
                f"| {format_elapsed(r.measurement)} |"
            )
        lines.append("")

        if result.skipped:
            skipped = ", ".join(f"`{n}`" for n in result.skipped)
            lines.append(f"Skipped: {skipped}")
            lines.append("")

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# JSON export
# ---------------------------------------------------------------------------


def export_json(results: Sequence[SuiteResult]) -> str:
    """Export results as an indented JSON document."""
    return json.dumps({"suites": [r.to_dict() for r in results]}, indent=2) + "\n"
