"""Measurement data structures and serialization.

Hierarchy::

    SuiteResult (one suite run)
      → measurements: list[Measurement]   (registration order)
        → elapsed: Measured | Failed
      → rankings: Rankings
        → strict / banded: list[RankedMeasurement]   (ascending position)

Elapsed time is a tagged variant rather than a float with an infinity
sentinel: ``Failed`` sorts after every ``Measured`` and never compares
equal to anything, so a crashed candidate can never share a rank with a
timed one.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, Union

if TYPE_CHECKING:
    from parsebench.bench.config import SuiteConfig


# ---------------------------------------------------------------------------
# Elapsed time variant
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Measured:
    """Mean duration of one measured cycle, in milliseconds."""

    ms: float

    def __post_init__(self) -> None:
        if math.isnan(self.ms) or self.ms < 0:
            raise ValueError(f"Elapsed time must be a non-negative number (got {self.ms}).")


FailureKind = Literal["crash", "invalid"]


@dataclass(frozen=True)
class Failed:
    """The candidate could not be timed."""

    reason: str
    kind: FailureKind = "crash"


Elapsed = Union[Measured, Failed]


# ---------------------------------------------------------------------------
# Measurement
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Measurement:
    """Outcome of timing one candidate in one suite run."""

    name: str
    elapsed: Elapsed

    @property
    def failed(self) -> bool:
        return isinstance(self.elapsed, Failed)

    @property
    def elapsed_ms(self) -> float | None:
        """Mean elapsed milliseconds, or None if the candidate failed."""
        if isinstance(self.elapsed, Measured):
            return self.elapsed.ms
        return None

    @property
    def sort_key(self) -> tuple[int, float, str]:
        """Ascending order: measured by time, then failures, name breaks ties."""
        if isinstance(self.elapsed, Measured):
            return (0, self.elapsed.ms, self.name)
        return (1, 0.0, self.name)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        d: dict[str, Any] = {"name": self.name}
        if isinstance(self.elapsed, Measured):
            d["elapsed_ms"] = round(self.elapsed.ms, 3)
        else:
            d["elapsed_ms"] = None
            d["failure"] = {"kind": self.elapsed.kind, "reason": self.elapsed.reason}
        return d


@dataclass(frozen=True)
class RankedMeasurement:
    """A measurement together with its 1-based rank position."""

    measurement: Measurement
    position: int

    @property
    def name(self) -> str:
        return self.measurement.name

    @property
    def elapsed(self) -> Elapsed:
        return self.measurement.elapsed

    @property
    def failed(self) -> bool:
        return self.measurement.failed

    def to_dict(self) -> dict[str, Any]:
        d = self.measurement.to_dict()
        d["position"] = self.position
        return d


@dataclass(frozen=True)
class Rankings:
    """Both ranking policies applied to one measurement set."""

    strict: list[RankedMeasurement] = field(default_factory=list)
    banded: list[RankedMeasurement] = field(default_factory=list)
    tolerance_ms: float = 250.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tolerance_ms": self.tolerance_ms,
            "strict": [r.to_dict() for r in self.strict],
            "banded": [r.to_dict() for r in self.banded],
        }


# ---------------------------------------------------------------------------
# Suite-level result
# ---------------------------------------------------------------------------


@dataclass
class SuiteResult:
    """Everything one suite run produced."""

    config: SuiteConfig
    measurements: list[Measurement] = field(default_factory=list)
    rankings: Rankings = field(default_factory=Rankings)
    skipped: list[str] = field(default_factory=list)
    start_time: str = ""
    end_time: str = ""

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def failures(self) -> list[Measurement]:
        """Measurements that crashed or produced invalid output."""
        return [m for m in self.measurements if m.failed]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "name": self.config.name,
            "rows": self.config.rows,
            "quotes": self.config.quotes,
            "cycles": self.config.cycles,
            "tolerance_ms": self.config.tolerance,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "measurements": [m.to_dict() for m in self.measurements],
            "rankings": self.rankings.to_dict(),
            "skipped": list(self.skipped),
        }
