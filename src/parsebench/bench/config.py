"""Suite configuration and profile loading.

Handles:
- The per-suite parameters (fixture size, quoting, cycles, tolerance).
- Validating a configuration before anything is measured.
- Loading suite profiles from YAML files.
- Merging CLI options with profile defaults.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

log = logging.getLogger("parsebench")

DEFAULT_CYCLES = 10
DEFAULT_TOLERANCE_MS = 250.0
DEFAULT_ROWS = (1_000, 10_000, 100_000)


class ConfigurationError(ValueError):
    """The benchmark cannot start because its configuration is invalid."""


# ---------------------------------------------------------------------------
# SuiteConfig
# ---------------------------------------------------------------------------


@dataclass
class SuiteConfig:
    """Resolved configuration for one benchmark suite."""

    name: str = ""  # Derived from rows/quotes if empty
    rows: int = 10_000
    quotes: bool = False

    cycles: int = DEFAULT_CYCLES  # Measured cycles after one warm-up
    tolerance: float = DEFAULT_TOLERANCE_MS  # Banded ranking tolerance (ms)

    fixture_path: Path | None = None  # Filled in by the CLI once generated

    def __post_init__(self) -> None:
        if not self.name:
            self.name = suite_name(self.rows, self.quotes)


def suite_name(rows: int, quotes: bool) -> str:
    """Human-readable suite name, e.g. ``'10,000 rows, quoted'``."""
    name = f"{rows:,} rows"
    if quotes:
        name += ", quoted"
    return name


@dataclass
class BenchSettings:
    """Everything a ``parsebench run`` needs: the suites and where fixtures live."""

    suites: list[SuiteConfig] = field(default_factory=list)
    fixtures_dir: Path = field(default_factory=lambda: Path("fixtures"))
    candidates_filter: list[str] | None = None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str


def validate_config(config: SuiteConfig) -> list[ValidationError]:
    """Validate a suite configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if isinstance(config.cycles, bool) or not isinstance(config.cycles, int):
        errors.append(
            ValidationError(
                field="cycles",
                message=f"Cycles must be an integer (got {config.cycles!r}).",
            )
        )
    elif config.cycles < 1:
        errors.append(
            ValidationError(
                field="cycles",
                message=f"Need at least 1 measured cycle (got {config.cycles}).",
            )
        )

    if math.isnan(config.tolerance) or config.tolerance < 0:
        errors.append(
            ValidationError(
                field="tolerance",
                message=f"Tolerance must be a non-negative number (got {config.tolerance}).",
            )
        )

    if config.rows < 1:
        errors.append(
            ValidationError(
                field="rows",
                message=f"Fixtures need at least 1 data row (got {config.rows}).",
            )
        )

    if not config.name.strip():
        errors.append(ValidationError(field="name", message="Suite name must be non-empty."))

    return errors


def check_config(config: SuiteConfig) -> None:
    """Raise ConfigurationError if *config* has any validation error."""
    errors = validate_config(config)
    if errors:
        messages = [f"  {e.field}: {e.message}" for e in errors]
        raise ConfigurationError(
            f"Invalid configuration for suite '{config.name}':\n" + "\n".join(messages)
        )


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a suite profile from a YAML file.

    Profile format::

        cycles: 10
        tolerance: 250
        fixtures_dir: fixtures
        candidates: [csv.reader, regex]   # optional filter

        suites:
          - name: "10k rows"
            rows: 10000
          - rows: 10000
            quotes: true
            cycles: 5        # per-suite override

    Returns:
        The parsed YAML as a dict.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    try:
        data = yaml.safe_load(profile_path.read_text())
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {profile_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    return data


def default_suites(
    *,
    rows: tuple[int, ...] = DEFAULT_ROWS,
    quotes: tuple[bool, ...] = (False, True),
    cycles: int = DEFAULT_CYCLES,
    tolerance: float = DEFAULT_TOLERANCE_MS,
) -> list[SuiteConfig]:
    """Build one suite per (rows, quotes) combination."""
    return [
        SuiteConfig(rows=n, quotes=q, cycles=cycles, tolerance=tolerance)
        for n in rows
        for q in quotes
    ]


def settings_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> BenchSettings:
    """Build BenchSettings from a parsed YAML profile.

    CLI overrides take precedence over profile values for cycles,
    tolerance, fixtures_dir and candidates.  Top-level cycles and
    tolerance are defaults for suites that do not set their own;
    a CLI value overrides both.

    Args:
        profile_data: Parsed YAML profile dict.
        cli_overrides: Dict of CLI option values.  ``None`` values are
            treated as "not given".

    Returns:
        BenchSettings with suites populated.
    """
    cli = {k: v for k, v in (cli_overrides or {}).items() if v is not None}

    default_cycles = profile_data.get("cycles", DEFAULT_CYCLES)
    default_tolerance = profile_data.get("tolerance", DEFAULT_TOLERANCE_MS)

    suites_data = profile_data.get("suites")
    if suites_data is None:
        suites_data = [{"rows": n, "quotes": q} for n in DEFAULT_ROWS for q in (False, True)]
    if not isinstance(suites_data, list):
        raise ValueError("Profile 'suites' must be a list of suite definitions")

    suites: list[SuiteConfig] = []
    for i, suite_data in enumerate(suites_data):
        if not isinstance(suite_data, dict):
            raise ValueError(f"Suite #{i + 1} must be a mapping, got {type(suite_data).__name__}")
        if "rows" not in suite_data:
            raise ValueError(f"Suite #{i + 1} has no 'rows'")

        name = suite_data.get("name")
        try:
            rows = int(suite_data["rows"])
            tolerance = float(
                cli.get("tolerance", suite_data.get("tolerance", default_tolerance))
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Suite #{i + 1}: {exc}") from exc

        suites.append(
            SuiteConfig(
                name=str(name) if name is not None else "",
                rows=rows,
                quotes=bool(suite_data.get("quotes", False)),
                cycles=cli.get("cycles", suite_data.get("cycles", default_cycles)),
                tolerance=tolerance,
            )
        )

    settings = BenchSettings(suites=suites)

    if cli.get("fixtures_dir"):
        settings.fixtures_dir = Path(cli["fixtures_dir"])
    elif profile_data.get("fixtures_dir"):
        settings.fixtures_dir = Path(profile_data["fixtures_dir"])

    if cli.get("candidates_filter"):
        settings.candidates_filter = list(cli["candidates_filter"])
    elif profile_data.get("candidates"):
        settings.candidates_filter = _candidate_names(profile_data["candidates"])

    return settings


def _candidate_names(value: Any) -> list[str]:
    """Normalize a profile ``candidates`` entry: a name, or a list of names."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(c) for c in value]
    raise ValueError(f"Profile 'candidates' must be a name or a list of names, got {value!r}")
