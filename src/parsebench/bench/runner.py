"""Suite execution engine.

Orchestrates:
1. Configuration validation (fails fast, before anything is timed)
2. Candidate exclusion based on the suite parameters
3. Sequential timing of each remaining candidate, with its output
   validated on every call
4. Ranking of the collected measurements under both policies
5. Progress reporting

Candidates are never run concurrently: overlapping candidates would
compete for the disk cache and CPU and skew each other's timings.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from parsebench.bench.config import ConfigurationError, SuiteConfig, check_config
from parsebench.bench.ranking import rank_all
from parsebench.bench.results import Measurement, SuiteResult
from parsebench.bench.timing import Operation, ValidationFailure, call_operation, time_candidate

log = logging.getLogger("parsebench")

Validator = Callable[[Any], None]


# ---------------------------------------------------------------------------
# Candidate
# ---------------------------------------------------------------------------


@dataclass
class Candidate:
    """One named implementation under comparison."""

    name: str
    operation: Operation
    exclude_when: Callable[[SuiteConfig], bool] | None = None
    description: str = ""

    def excluded(self, config: SuiteConfig) -> bool:
        """True if this candidate should not run under *config*."""
        return self.exclude_when is not None and bool(self.exclude_when(config))


def validated(operation: Operation, validator: Validator) -> Operation:
    """Wrap *operation* so its result goes through *validator* before returning.

    Any exception raised by the validator is re-raised as
    ValidationFailure so the timer can tell bad output from a crash.
    """

    async def checked() -> Any:
        result = await call_operation(operation)
        try:
            validator(result)
        except ValidationFailure:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ValidationFailure(f"{type(exc).__name__}: {exc}") from exc
        return result

    return checked


# ---------------------------------------------------------------------------
# Progress callback
# ---------------------------------------------------------------------------


@dataclass
class SuiteProgress:
    """Progress info passed to the callback."""

    phase: str  # "skip", "done"
    suite: str
    candidate: str
    index: int  # 1-based
    total: int
    measurement: Measurement | None = None


ProgressCallback = Callable[[SuiteProgress], None]


# ---------------------------------------------------------------------------
# SuiteRunner
# ---------------------------------------------------------------------------


class SuiteRunner:
    """Times a set of candidates according to a SuiteConfig.

    Usage::

        runner = SuiteRunner(config, candidates, validator)
        result = await runner.run()
    """

    def __init__(
        self,
        config: SuiteConfig,
        candidates: Sequence[Candidate],
        validator: Validator,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        self.config = config
        self.candidates = list(candidates)
        self.validator = validator
        self.progress: ProgressCallback = progress_callback or self._default_progress

    def check(self) -> None:
        """Validate the configuration and candidate set.

        Raises:
            ConfigurationError: On invalid suite parameters or on
                empty or duplicate candidate names.
        """
        check_config(self.config)

        seen: set[str] = set()
        for cand in self.candidates:
            if not cand.name or not cand.name.strip():
                raise ConfigurationError("Candidate names must be non-empty.")
            if cand.name in seen:
                raise ConfigurationError(f"Duplicate candidate name: '{cand.name}'")
            seen.add(cand.name)

    async def run(self) -> SuiteResult:
        """Execute the suite.

        Returns:
            SuiteResult with measurements in registration order and both
            rankings.

        Raises:
            ConfigurationError: If the configuration is invalid.  Nothing
                has been executed when this is raised.
        """
        self.check()

        result = SuiteResult(
            config=self.config,
            start_time=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
        )

        active: list[Candidate] = []
        for idx, cand in enumerate(self.candidates):
            if cand.excluded(self.config):
                result.skipped.append(cand.name)
                self.progress(
                    SuiteProgress(
                        phase="skip",
                        suite=self.config.name,
                        candidate=cand.name,
                        index=idx + 1,
                        total=len(self.candidates),
                    )
                )
            else:
                active.append(cand)

        log.info("Running %s (%d candidates)", self.config.name, len(active))

        for idx, cand in enumerate(active):
            measurement = await time_candidate(
                cand.name,
                validated(cand.operation, self.validator),
                cycles=self.config.cycles,
            )
            result.measurements.append(measurement)
            self.progress(
                SuiteProgress(
                    phase="done",
                    suite=self.config.name,
                    candidate=cand.name,
                    index=idx + 1,
                    total=len(active),
                    measurement=measurement,
                )
            )

        result.rankings = rank_all(result.measurements, tolerance=self.config.tolerance)
        result.end_time = time.strftime("%Y-%m-%dT%H:%M:%S%z")
        return result

    @staticmethod
    def _default_progress(progress: SuiteProgress) -> None:
        """Default progress callback: log at DEBUG (timings are logged by the timer)."""
        if progress.phase == "skip":
            log.info("  %s: skipped for %s", progress.candidate, progress.suite)
            return
        status = "failed" if progress.measurement and progress.measurement.failed else "ok"
        log.debug(
            "  [%d/%d] %s [%s]",
            progress.index,
            progress.total,
            progress.candidate,
            status,
        )


async def run_suites(
    suites: Sequence[SuiteConfig],
    build_candidates: Callable[[SuiteConfig], Sequence[Candidate]],
    build_validator: Callable[[SuiteConfig], Validator],
    *,
    progress_callback: ProgressCallback | None = None,
) -> list[SuiteResult]:
    """Run several suites one after another.

    Every suite is validated before the first one starts.
    """
    for config in suites:
        check_config(config)

    results: list[SuiteResult] = []
    for config in suites:
        runner = SuiteRunner(
            config,
            build_candidates(config),
            build_validator(config),
            progress_callback=progress_callback,
        )
        results.append(await runner.run())
    return results
