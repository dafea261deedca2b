"""CSV fixture generation.

Fixtures have a header line followed by *rows* data rows.  The first
column is the 0-based row id, so a correct parse of the whole file sums
to ``rows * (rows - 1) / 2`` in that column.

Quoted fixtures wrap every text field in double quotes and embed the
things naive splitters get wrong: commas, doubled quotes and, on every
50th row, a newline inside a field.

Fixtures are written to a temp file and moved into place, so an
interrupted run never leaves a partial file under the cached name.  A
cached file that does not hold the expected rows is regenerated.
"""

from __future__ import annotations

import csv
import os
import tempfile
from pathlib import Path

from parsebench.logging import get_logger
from parsebench.parsers.validate import expected_id_sum

log = get_logger("fixtures")

HEADER = "id,name,amount,note"


def _amount(i: int) -> str:
    return f"{(i * 7919) % 100_000 / 100:.2f}"


def fixture_line(i: int, *, quotes: bool) -> str:
    """Render data row *i* (without the line terminator)."""
    if not quotes:
        return f"{i},name{i},{_amount(i)},note {i}"
    note = f'He said ""hi"", row {i}'
    if i % 50 == 49:
        note += "\nsecond line"
    return f'{i},"Name, {i}","{_amount(i)}","{note}"'


def write_fixture(path: Path, rows: int, *, quotes: bool = False) -> Path:
    """Write a fixture with *rows* data rows to *path*.

    Returns:
        *path*, for chaining.
    """
    if rows < 1:
        raise ValueError(f"A fixture needs at least 1 data row (got {rows}).")

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(HEADER + "\n")
            for i in range(rows):
                f.write(fixture_line(i, quotes=quotes) + "\n")
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    log.debug("Wrote %d rows to %s", rows, path)
    return path


def fixture_is_complete(path: Path, rows: int) -> bool:
    """True if *path* has the fixture header and exactly ids ``0..rows-1``."""
    try:
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.reader(f)
            if next(reader, None) != HEADER.split(","):
                return False
            count = 0
            total = 0
            for row in reader:
                count += 1
                total += int(row[0])
    except (OSError, UnicodeDecodeError, csv.Error, IndexError, ValueError):
        return False
    return count == rows and total == expected_id_sum(rows)


def fixture_filename(rows: int, *, quotes: bool = False) -> str:
    """File name used for a cached fixture, e.g. ``rows_1000_quoted.csv``."""
    suffix = "_quoted" if quotes else ""
    return f"rows_{rows}{suffix}.csv"


def ensure_fixture(directory: Path, rows: int, *, quotes: bool = False) -> Path:
    """Return the path to a fixture, generating it on first use."""
    path = directory / fixture_filename(rows, quotes=quotes)
    if path.exists():
        if fixture_is_complete(path, rows):
            log.debug("Reusing fixture %s", path)
            return path
        log.warning("Fixture %s is incomplete or corrupt; regenerating", path)
    else:
        log.info("Generating fixture %s", path)
    return write_fixture(path, rows, quotes=quotes)
