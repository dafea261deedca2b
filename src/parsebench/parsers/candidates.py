"""CSV parser implementations under comparison.

Every parser is a coroutine function taking the fixture path and
returning the data rows (header excluded) as lists of field values;
every parser but pyarrow returns strings.  Files are opened in ``with``
blocks so a parser that raises still releases its handle.  The library
parsers import their library on first call and are skipped when it is
not installed (`pip install parsebench[parsers]`).

Registered candidates, in run order:

==================  =====================================================
str.split           Split lines and fields on separators; no quoting.
csv.reader          Standard library reader.
csv.DictReader      Standard library reader producing dicts.
csv.reader-thread   csv.reader run in a worker thread.
regex               Field tokenizer built on a single regular expression.
scanner             Character-by-character state machine.
pandas              pandas.read_csv.
pyarrow             pyarrow.csv.read_csv.
polars              polars.read_csv.
==================  =====================================================
"""

from __future__ import annotations

import asyncio
import csv
import functools
import importlib.util
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

from parsebench.bench.config import SuiteConfig
from parsebench.bench.runner import Candidate
from parsebench.logging import get_logger

log = get_logger("candidates")

Rows = list[list[str]]

# The scanner is pure Python per character; past this size a single suite
# takes minutes.
SCANNER_MAX_ROWS = 100_000


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


async def parse_split(path: Path) -> Rows:
    """Naive parse: one row per line, one field per comma."""
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line.split(",") for line in lines[1:]]


def _read_csv_rows(path: Path) -> Rows:
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        next(reader, None)  # header
        return list(reader)


async def parse_csv_reader(path: Path) -> Rows:
    return _read_csv_rows(path)


async def parse_csv_dictreader(path: Path) -> Rows:
    with open(path, newline="", encoding="utf-8") as f:
        return [list(row.values()) for row in csv.DictReader(f)]


async def parse_csv_reader_thread(path: Path) -> Rows:
    """csv.reader off the event loop, as an I/O-bound service would run it."""
    return await asyncio.to_thread(_read_csv_rows, path)


_FIELD_RE = re.compile(r'(?:"((?:[^"]|"")*)"|([^,"\r\n]*))(,|\r\n|\n|$)')


def _regex_rows(text: str) -> Rows:
    rows: Rows = []
    row: list[str] = []
    pos = 0
    end = len(text)
    while pos < end:
        m = _FIELD_RE.match(text, pos)
        if m is None:
            raise ValueError(f"Malformed CSV at offset {pos}")
        quoted, plain, sep = m.groups()
        row.append(quoted.replace('""', '"') if quoted is not None else plain)
        pos = m.end()
        if sep != ",":
            rows.append(row)
            row = []
            if not sep:
                break
    return rows


async def parse_regex(path: Path) -> Rows:
    return _regex_rows(path.read_text(encoding="utf-8"))[1:]


def _scan_rows(text: str) -> Rows:
    rows: Rows = []
    row: list[str] = []
    field: list[str] = []
    in_quotes = False
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < n and text[i + 1] == '"':
                    field.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                field.append(ch)
        elif ch == '"':
            in_quotes = True
        elif ch == ",":
            row.append("".join(field))
            field = []
        elif ch == "\n":
            row.append("".join(field))
            rows.append(row)
            row, field = [], []
        elif ch != "\r":
            field.append(ch)
        i += 1
    if in_quotes:
        raise ValueError("Unterminated quoted field at end of input")
    if field or row:
        row.append("".join(field))
        rows.append(row)
    return rows


async def parse_scanner(path: Path) -> Rows:
    return _scan_rows(path.read_text(encoding="utf-8"))[1:]


# ---------------------------------------------------------------------------
# Library parsers (optional `parsers` extra)
# ---------------------------------------------------------------------------


async def parse_pandas(path: Path) -> Rows:
    import pandas as pd

    frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    return frame.values.tolist()


async def parse_pyarrow(path: Path) -> list[list[Any]]:
    """pyarrow's multithreaded reader; column types are inferred."""
    from pyarrow import csv as pacsv

    table = pacsv.read_csv(
        str(path),
        parse_options=pacsv.ParseOptions(newlines_in_values=True),
    )
    return [list(row.values()) for row in table.to_pylist()]


async def parse_polars(path: Path) -> Rows:
    import polars as pl

    frame = pl.read_csv(path, infer_schema_length=0)
    return [list(row) for row in frame.rows()]


def library_installed(module: str) -> bool:
    return importlib.util.find_spec(module) is not None


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParserSpec:
    """A registered parser and the suites it sits out."""

    name: str
    parse: Callable[[Path], Awaitable[Any]]
    description: str
    exclude_when: Callable[[SuiteConfig], bool] | None = None
    note: str = ""  # Shown by `parsebench candidates`
    requires: str | None = None  # Import name of a third-party library

    @property
    def installed(self) -> bool:
        return self.requires is None or library_installed(self.requires)

    def excluded(self, config: SuiteConfig) -> bool:
        """True if the parser cannot or should not run under *config*."""
        if not self.installed:
            return True
        return self.exclude_when is not None and bool(self.exclude_when(config))

    @property
    def display_note(self) -> str:
        if self.installed:
            return self.note
        missing = f"{self.requires} not installed"
        return f"{self.note}; {missing}" if self.note else missing


PARSERS: tuple[ParserSpec, ...] = (
    ParserSpec(
        "str.split",
        parse_split,
        "Split lines and fields on separators; no quoting",
        exclude_when=lambda config: config.quotes,
        note="skipped for quoted fixtures",
    ),
    ParserSpec("csv.reader", parse_csv_reader, "Standard library reader"),
    ParserSpec("csv.DictReader", parse_csv_dictreader, "Standard library reader producing dicts"),
    ParserSpec(
        "csv.reader-thread",
        parse_csv_reader_thread,
        "csv.reader run in a worker thread",
    ),
    ParserSpec("regex", parse_regex, "Field tokenizer built on a regular expression"),
    ParserSpec(
        "scanner",
        parse_scanner,
        "Character-by-character state machine",
        exclude_when=lambda config: config.rows > SCANNER_MAX_ROWS,
        note=f"skipped above {SCANNER_MAX_ROWS:,} rows",
    ),
    ParserSpec(
        "pandas",
        parse_pandas,
        "pandas.read_csv with string columns",
        requires="pandas",
    ),
    ParserSpec(
        "pyarrow",
        parse_pyarrow,
        "pyarrow.csv.read_csv, multithreaded, inferred types",
        requires="pyarrow",
    ),
    ParserSpec(
        "polars",
        parse_polars,
        "polars.read_csv with string columns",
        requires="polars",
    ),
)


def parser_names() -> list[str]:
    return [spec.name for spec in PARSERS]


def build_candidates(
    fixture_path: Path,
    *,
    only: list[str] | None = None,
) -> list[Candidate]:
    """Bind every registered parser to *fixture_path*.

    Parsers whose library is not installed are still returned; their
    exclusion predicate skips them in every suite.

    Args:
        fixture_path: The CSV file each candidate parses.
        only: If given, keep just these parser names (registration order
            is preserved).

    Raises:
        ValueError: If *only* names an unknown parser.
    """
    if only is not None:
        unknown = sorted(set(only) - set(parser_names()))
        if unknown:
            raise ValueError(
                f"Unknown candidate(s): {', '.join(unknown)}. "
                f"Available: {', '.join(parser_names())}"
            )

    candidates: list[Candidate] = []
    for spec in PARSERS:
        if only is not None and spec.name not in only:
            continue
        candidates.append(
            Candidate(
                name=spec.name,
                operation=functools.partial(spec.parse, fixture_path),
                exclude_when=spec.excluded,
                description=spec.description,
            )
        )
    log.debug("Built %d candidates for %s", len(candidates), fixture_path)
    return candidates
