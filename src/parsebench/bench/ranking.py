"""Rank measurements by elapsed time.

Two policies share one sort-and-walk algorithm:

STRICT
    Position is the 1-based index in ascending elapsed order.  A candidate
    1 ms slower than its neighbour still gets the next position.

BANDED
    Timings within a fixed tolerance of each other are treated as tied.
    Speed differences of a few milliseconds tend to flip between runs and
    a gain of a couple of hundred milliseconds is hardly noticeable, so
    the banded ranking is the stable answer to "which parser is
    effectively fastest".

    A measurement joins the current band only if it is within the
    tolerance of *every* member already in the band, not just of its
    neighbour.  Adjacent-only closeness would let a band drift: with
    ``A=100, B=340, C=580`` and a 250 ms tolerance, B is close to both A
    and C, yet A and C are 480 ms apart, so C starts a new band.

    Membership is first-come: earlier members are never re-validated
    against later ones.

Ordering: measured candidates ascend by time, failed ones come last, and
equal timings are ordered by name so the output does not depend on input
order.  Failures never share a position with anything.
"""

from __future__ import annotations

import enum
import math
from typing import Iterable, Sequence

from parsebench.bench.config import DEFAULT_TOLERANCE_MS, ConfigurationError
from parsebench.bench.results import (
    Measured,
    Measurement,
    RankedMeasurement,
    Rankings,
)


class RankingPolicy(enum.Enum):
    """How near-equal timings are ranked."""

    STRICT = "strict"
    BANDED = "banded"


def sort_measurements(measurements: Iterable[Measurement]) -> list[Measurement]:
    """Return measurements in ascending elapsed order, failures last."""
    return sorted(measurements, key=lambda m: m.sort_key)


def _close(a: Measurement, b: Measurement, tolerance: float) -> bool:
    if not isinstance(a.elapsed, Measured) or not isinstance(b.elapsed, Measured):
        return False
    return abs(a.elapsed.ms - b.elapsed.ms) <= tolerance


def _joins_band(
    ordered: Sequence[Measurement],
    band_start: int,
    index: int,
    tolerance: float,
) -> bool:
    """Check *index* against its neighbour and every earlier band member."""
    candidate = ordered[index]
    if not _close(candidate, ordered[index - 1], tolerance):
        return False
    return all(_close(candidate, ordered[j], tolerance) for j in range(band_start, index - 1))


def rank(
    measurements: Iterable[Measurement],
    policy: RankingPolicy,
    *,
    tolerance: float = DEFAULT_TOLERANCE_MS,
) -> list[RankedMeasurement]:
    """Assign rank positions to *measurements* under *policy*.

    Args:
        measurements: Measurements from one suite run, in any order.
        policy: STRICT or BANDED.
        tolerance: Maximum difference in milliseconds treated as a tie.
            Only used by the BANDED policy.

    Returns:
        Ranked measurements in ascending position order.  Empty input
        gives an empty list.

    Raises:
        ConfigurationError: If *tolerance* is negative or NaN.
    """
    if math.isnan(tolerance) or tolerance < 0:
        raise ConfigurationError(f"Tolerance must be a non-negative number (got {tolerance}).")

    ordered = sort_measurements(measurements)
    ranked: list[RankedMeasurement] = []
    band_start = 0
    position = 0

    for i, m in enumerate(ordered):
        if (
            i > 0
            and policy is RankingPolicy.BANDED
            and _joins_band(ordered, band_start, i, tolerance)
        ):
            ranked.append(RankedMeasurement(measurement=m, position=position))
            continue
        position += 1
        band_start = i
        ranked.append(RankedMeasurement(measurement=m, position=position))

    return ranked


def rank_all(
    measurements: Sequence[Measurement],
    *,
    tolerance: float = DEFAULT_TOLERANCE_MS,
) -> Rankings:
    """Rank *measurements* under both policies."""
    return Rankings(
        strict=rank(measurements, RankingPolicy.STRICT),
        banded=rank(measurements, RankingPolicy.BANDED, tolerance=tolerance),
        tolerance_ms=tolerance,
    )
