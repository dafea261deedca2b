"""Tests for parsebench.bench.runner — suite execution engine."""

from __future__ import annotations

import asyncio
import unittest
from typing import Any

from parsebench.bench.config import ConfigurationError, SuiteConfig
from parsebench.bench.results import Failed
from parsebench.bench.runner import (
    Candidate,
    SuiteProgress,
    SuiteRunner,
    run_suites,
    validated,
)
from parsebench.bench.timing import ValidationFailure


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_config(**kwargs: Any) -> SuiteConfig:
    """Create a SuiteConfig with fast test defaults."""
    defaults: dict[str, Any] = {"rows": 10, "cycles": 2, "tolerance": 250.0}
    defaults.update(kwargs)
    return SuiteConfig(**defaults)


def _returning(value: Any):
    async def op() -> Any:
        await asyncio.sleep(0)
        return value

    return op


def _raising(exc: Exception):
    async def op() -> Any:
        raise exc

    return op


def _accept(result: Any) -> None:
    return None


def _expect_ok(result: Any) -> None:
    if result != "ok":
        raise ValidationFailure(f"Test failed. Got {result!r}")


class _Recorder:
    """Collects progress events."""

    def __init__(self) -> None:
        self.events: list[SuiteProgress] = []

    def __call__(self, progress: SuiteProgress) -> None:
        self.events.append(progress)


# ---------------------------------------------------------------------------
# validated()
# ---------------------------------------------------------------------------


class TestValidated(unittest.IsolatedAsyncioTestCase):
    """Tests for the validation wrapper."""

    async def test_passes_result_through(self) -> None:
        op = validated(_returning("ok"), _expect_ok)
        self.assertEqual(await op(), "ok")

    async def test_rejection_raises_validation_failure(self) -> None:
        op = validated(_returning("nope"), _expect_ok)
        with self.assertRaises(ValidationFailure):
            await op()

    async def test_other_validator_errors_become_validation_failure(self) -> None:
        def picky(result: Any) -> None:
            raise AssertionError("checksum mismatch")

        op = validated(_returning("ok"), picky)
        with self.assertRaises(ValidationFailure) as cm:
            await op()
        self.assertIn("checksum mismatch", str(cm.exception))

    async def test_operation_errors_are_not_wrapped(self) -> None:
        op = validated(_raising(OSError("disk gone")), _expect_ok)
        with self.assertRaises(OSError):
            await op()


# ---------------------------------------------------------------------------
# SuiteRunner
# ---------------------------------------------------------------------------


class TestSuiteRunner(unittest.IsolatedAsyncioTestCase):
    """Tests for SuiteRunner.run()."""

    async def test_measurements_in_registration_order(self) -> None:
        cands = [Candidate(n, _returning("ok")) for n in ("zeta", "alpha", "mid")]
        result = await SuiteRunner(_make_config(), cands, _expect_ok).run()
        self.assertEqual([m.name for m in result.measurements], ["zeta", "alpha", "mid"])
        self.assertTrue(all(not m.failed for m in result.measurements))

    async def test_rankings_computed(self) -> None:
        cands = [Candidate(n, _returning("ok")) for n in ("a", "b")]
        result = await SuiteRunner(_make_config(tolerance=250.0), cands, _expect_ok).run()
        self.assertEqual(len(result.rankings.strict), 2)
        self.assertEqual([r.position for r in result.rankings.strict], [1, 2])
        # Two no-op candidates are far closer than 250 ms.
        self.assertEqual([r.position for r in result.rankings.banded], [1, 1])
        self.assertEqual(result.rankings.tolerance_ms, 250.0)

    async def test_crash_is_isolated(self) -> None:
        cands = [
            Candidate("X", _raising(RuntimeError("crash during warm-up"))),
            Candidate("good", _returning("ok")),
        ]
        result = await SuiteRunner(_make_config(), cands, _expect_ok).run()
        by_name = {m.name: m for m in result.measurements}
        self.assertTrue(by_name["X"].failed)
        self.assertFalse(by_name["good"].failed)
        self.assertEqual(result.rankings.strict[-1].name, "X")
        self.assertEqual(result.rankings.banded[-1].name, "X")
        self.assertEqual(result.rankings.banded[-1].position, 2)

    async def test_validation_failure_is_isolated(self) -> None:
        cands = [
            Candidate("wrong", _returning("garbage")),
            Candidate("right", _returning("ok")),
        ]
        result = await SuiteRunner(_make_config(), cands, _expect_ok).run()
        wrong = result.measurements[0]
        self.assertIsInstance(wrong.elapsed, Failed)
        self.assertEqual(wrong.elapsed.kind, "invalid")
        self.assertEqual([m.name for m in result.failures], ["wrong"])

    async def test_candidates_never_overlap(self) -> None:
        active = 0
        max_active = 0

        def tracked(delay: float):
            async def op() -> str:
                nonlocal active, max_active
                active += 1
                max_active = max(max_active, active)
                await asyncio.sleep(delay)
                active -= 1
                return "ok"

            return op

        cands = [Candidate(f"c{i}", tracked(0.001 * i)) for i in range(4)]
        await SuiteRunner(_make_config(), cands, _expect_ok).run()
        self.assertEqual(max_active, 1)

    async def test_excluded_candidates_skipped(self) -> None:
        calls: list[str] = []

        def op_for(name: str):
            async def op() -> str:
                calls.append(name)
                return "ok"

            return op

        cands = [
            Candidate("split", op_for("split"), exclude_when=lambda cfg: cfg.quotes),
            Candidate("csv", op_for("csv")),
        ]
        result = await SuiteRunner(_make_config(quotes=True), cands, _expect_ok).run()
        self.assertEqual(result.skipped, ["split"])
        self.assertEqual([m.name for m in result.measurements], ["csv"])
        self.assertNotIn("split", calls)

    async def test_exclusion_depends_on_config(self) -> None:
        cand = Candidate("big", _returning("ok"), exclude_when=lambda cfg: cfg.rows > 100)
        small = await SuiteRunner(_make_config(rows=10), [cand], _expect_ok).run()
        large = await SuiteRunner(_make_config(rows=1000), [cand], _expect_ok).run()
        self.assertEqual(small.skipped, [])
        self.assertEqual(large.skipped, ["big"])

    async def test_uses_configured_cycles(self) -> None:
        calls = 0

        async def op() -> str:
            nonlocal calls
            calls += 1
            return "ok"

        await SuiteRunner(_make_config(cycles=7), [Candidate("c", op)], _expect_ok).run()
        self.assertEqual(calls, 8)

    async def test_empty_candidate_set(self) -> None:
        result = await SuiteRunner(_make_config(), [], _accept).run()
        self.assertEqual(result.measurements, [])
        self.assertEqual(result.rankings.strict, [])
        self.assertEqual(result.rankings.banded, [])

    async def test_progress_callback(self) -> None:
        recorder = _Recorder()
        cands = [
            Candidate("skipme", _returning("ok"), exclude_when=lambda cfg: True),
            Candidate("a", _returning("ok")),
            Candidate("b", _raising(ValueError("bad"))),
        ]
        await SuiteRunner(_make_config(), cands, _expect_ok, progress_callback=recorder).run()
        phases = [(e.phase, e.candidate) for e in recorder.events]
        self.assertEqual(phases, [("skip", "skipme"), ("done", "a"), ("done", "b")])
        self.assertTrue(recorder.events[-1].measurement.failed)
        self.assertEqual(recorder.events[-1].index, 2)
        self.assertEqual(recorder.events[-1].total, 2)

    async def test_timestamps_set(self) -> None:
        result = await SuiteRunner(_make_config(), [], _accept).run()
        self.assertTrue(result.start_time)
        self.assertTrue(result.end_time)


class TestSuiteRunnerConfiguration(unittest.IsolatedAsyncioTestCase):
    """Configuration errors abort before anything runs."""

    async def _assert_rejected(self, config: SuiteConfig, cands: list[Candidate]) -> None:
        with self.assertRaises(ConfigurationError):
            await SuiteRunner(config, cands, _accept).run()

    async def test_negative_cycles(self) -> None:
        calls: list[int] = []

        async def op() -> None:
            calls.append(1)

        await self._assert_rejected(_make_config(cycles=-1), [Candidate("a", op)])
        self.assertEqual(calls, [])

    async def test_zero_cycles(self) -> None:
        await self._assert_rejected(_make_config(cycles=0), [])

    async def test_negative_tolerance(self) -> None:
        await self._assert_rejected(_make_config(tolerance=-0.5), [])

    async def test_duplicate_names(self) -> None:
        cands = [Candidate("a", _returning("ok")), Candidate("a", _returning("ok"))]
        await self._assert_rejected(_make_config(), cands)

    async def test_blank_name(self) -> None:
        await self._assert_rejected(_make_config(), [Candidate("  ", _returning("ok"))])

    def test_check_is_synchronous(self) -> None:
        runner = SuiteRunner(_make_config(cycles=0), [], _accept)
        with self.assertRaises(ConfigurationError):
            runner.check()


# ---------------------------------------------------------------------------
# run_suites
# ---------------------------------------------------------------------------


class TestRunSuites(unittest.IsolatedAsyncioTestCase):
    """Tests for run_suites()."""

    async def test_runs_each_suite(self) -> None:
        suites = [_make_config(rows=10), _make_config(rows=20, quotes=True)]
        seen: list[int] = []

        def build_candidates(cfg: SuiteConfig) -> list[Candidate]:
            return [Candidate("a", _returning(cfg.rows))]

        def build_validator(cfg: SuiteConfig):
            def check(result: Any) -> None:
                seen.append(result)
                if result != cfg.rows:
                    raise ValidationFailure("wrong fixture")

            return check

        results = await run_suites(suites, build_candidates, build_validator)
        self.assertEqual([r.name for r in results], ["10 rows", "20 rows, quoted"])
        self.assertTrue(all(not r.failures for r in results))
        self.assertEqual(set(seen), {10, 20})

    async def test_bad_suite_rejected_before_first_runs(self) -> None:
        calls: list[str] = []

        async def op() -> None:
            calls.append("ran")

        suites = [_make_config(), _make_config(cycles=0)]
        with self.assertRaises(ConfigurationError):
            await run_suites(suites, lambda cfg: [Candidate("a", op)], lambda cfg: _accept)
        self.assertEqual(calls, [])


if __name__ == "__main__":
    unittest.main()
