"""Correctness check for parsed fixture rows."""

from __future__ import annotations

from typing import Any, Callable, Sequence

from parsebench.bench.timing import ValidationFailure


def expected_id_sum(rows: int) -> int:
    """Sum of the row ids ``0..rows-1``."""
    return rows * (rows - 1) // 2


def make_row_sum_validator(rows: int) -> Callable[[Sequence[Sequence[Any]]], None]:
    """Build a validator for a fixture with *rows* data rows.

    The validator sums the first column of every parsed row and raises
    ValidationFailure unless it matches :func:`expected_id_sum`.  A parser
    that keeps the header, drops rows, or splits a quoted field in two
    fails this check.
    """
    expected = expected_id_sum(rows)

    def check_rows(parsed: Sequence[Sequence[Any]]) -> None:
        total = 0
        for lineno, row in enumerate(parsed, start=1):
            try:
                total += int(row[0])
            except (IndexError, TypeError, ValueError) as exc:
                raise ValidationFailure(f"Test failed. Bad id in row {lineno}: {row!r:.60}") from exc
        if total != expected:
            raise ValidationFailure(f"Test failed. Sum: {total} (expected {expected})")

    return check_rows
