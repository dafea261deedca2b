"""Command-line interface for parsebench.

Subcommands:
    parsebench run          Benchmark the parser candidates and rank them
    parsebench candidates   List the registered parser candidates
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from parsebench import __version__
from parsebench.bench.config import (
    DEFAULT_CYCLES,
    DEFAULT_ROWS,
    DEFAULT_TOLERANCE_MS,
    BenchSettings,
    ConfigurationError,
    check_config,
    default_suites,
    load_profile,
    settings_from_profile,
)
from parsebench.bench.export import EXPORT_FORMATS
from parsebench.logging import setup_logging

_QUOTING = {"off": (False,), "on": (True,), "both": (False, True)}


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """parsebench — Rank CSV parsers by how fast they effectively are."""


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@main.command()
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML profile defining the suites to run.",
)
@click.option(
    "--rows",
    type=int,
    multiple=True,
    help="Fixture size in data rows (repeatable; default: 1000, 10000, 100000).",
)
@click.option(
    "--quoting",
    type=click.Choice(sorted(_QUOTING)),
    default="both",
    show_default=True,
    help="Run unquoted fixtures, quoted fixtures, or both.",
)
@click.option("--cycles", type=int, default=None, help="Measured cycles per candidate (default: 10).")
@click.option(
    "--tolerance",
    type=float,
    default=None,
    help="Milliseconds within which candidates share a rank (default: 250).",
)
@click.option(
    "--fixtures-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Where generated fixtures are cached (default: ./fixtures).",
)
@click.option(
    "--candidates",
    "candidates_csv",
    type=str,
    default=None,
    help="Comma-separated candidate filter.",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(EXPORT_FORMATS),
    default="text",
    show_default=True,
    help="Report format.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the report to a file instead of stdout.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show errors.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None)
def run(  # noqa: PLR0913
    profile_path: Path | None,
    rows: tuple[int, ...],
    quoting: str,
    cycles: int | None,
    tolerance: float | None,
    fixtures_dir: Path | None,
    candidates_csv: str | None,
    fmt: str,
    output: Path | None,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Benchmark every parser candidate and print the ranking.

    Each candidate parses the fixture once as a warm-up and then
    --cycles more times; the mean is ranked.  A candidate that crashes
    or returns wrong rows is ranked last instead of aborting the run.

    \b
    Examples:
        parsebench run --rows 10000 --quoting off
        parsebench run --profile suites.yaml --format markdown -o RANKING.md
        parsebench run --rows 1000 --candidates csv.reader,regex --cycles 3
    """
    from parsebench.bench.display import format_run_report
    from parsebench.bench.export import export_csv, export_json, export_markdown
    from parsebench.bench.runner import run_suites
    from parsebench.parsers.candidates import build_candidates
    from parsebench.parsers.fixtures import ensure_fixture
    from parsebench.parsers.validate import make_row_sum_validator

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    only = [c.strip() for c in candidates_csv.split(",") if c.strip()] if candidates_csv else None
    cli_overrides: dict[str, object] = {
        "cycles": cycles,
        "tolerance": tolerance,
        "fixtures_dir": fixtures_dir,
        "candidates_filter": only,
    }

    try:
        if profile_path:
            settings = settings_from_profile(load_profile(profile_path), cli_overrides=cli_overrides)
        else:
            settings = BenchSettings(
                suites=default_suites(
                    rows=rows or DEFAULT_ROWS,
                    quotes=_QUOTING[quoting],
                    cycles=cycles if cycles is not None else DEFAULT_CYCLES,
                    tolerance=tolerance if tolerance is not None else DEFAULT_TOLERANCE_MS,
                ),
                candidates_filter=only,
            )
            if fixtures_dir:
                settings.fixtures_dir = fixtures_dir

        for suite in settings.suites:
            check_config(suite)
        # Reject unknown candidate names before generating any fixture.
        build_candidates(settings.fixtures_dir, only=settings.candidates_filter)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    for suite in settings.suites:
        suite.fixture_path = ensure_fixture(settings.fixtures_dir, suite.rows, quotes=suite.quotes)

    try:
        results = asyncio.run(
            run_suites(
                settings.suites,
                lambda cfg: build_candidates(cfg.fixture_path, only=settings.candidates_filter),
                lambda cfg: make_row_sum_validator(cfg.rows),
            )
        )
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904

    if fmt == "markdown":
        text = export_markdown(results)
    elif fmt == "csv":
        text = export_csv(results)
    elif fmt == "json":
        text = export_json(results)
    else:
        text = format_run_report(results)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text if text.endswith("\n") else text + "\n")
        click.echo(f"Results saved to: {output}")
    else:
        click.echo(text)


# ---------------------------------------------------------------------------
# candidates
# ---------------------------------------------------------------------------


@main.command("candidates")
def candidates_cmd() -> None:
    """List the registered parser candidates in run order."""
    from parsebench.formatting import format_table
    from parsebench.parsers.candidates import PARSERS

    rows = [[spec.name, spec.description, spec.display_note] for spec in PARSERS]
    click.echo(format_table(["Candidate", "Description", "Notes"], rows, indent=0))
