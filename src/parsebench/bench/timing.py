"""Timing capture for benchmark candidates.

Each candidate is executed once as a discarded warm-up and then for a
fixed number of measured cycles.  Wall-clock time across the measured
block is divided by the cycle count to give the mean per-cycle duration.

A candidate that raises at any point (warm-up included), SystemExit
included, is not retried: the failure is logged and recorded as a
``Failed`` measurement so that the remaining candidates are still
measured.  Only KeyboardInterrupt and task cancellation abort the suite.
"""

from __future__ import annotations

import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Union

from parsebench.bench.config import DEFAULT_CYCLES, ConfigurationError
from parsebench.bench.results import Failed, Measured, Measurement

log = logging.getLogger("parsebench")

Operation = Callable[[], Union[Awaitable[Any], Any]]


class ValidationFailure(Exception):
    """A candidate produced output that the validator rejected."""


# ---------------------------------------------------------------------------
# Core timing implementation
# ---------------------------------------------------------------------------


async def call_operation(operation: Operation) -> Any:
    """Invoke *operation*, awaiting the result if it is awaitable."""
    result = operation()
    if inspect.isawaitable(result):
        result = await result
    return result


async def time_candidate(
    name: str,
    operation: Operation,
    *,
    cycles: int = DEFAULT_CYCLES,
) -> Measurement:
    """Time *operation* and return its mean per-cycle duration.

    Args:
        name: Candidate name, used for the measurement and log lines.
        operation: Zero-argument callable, usually a coroutine function.
        cycles: Number of measured repetitions after the warm-up.

    Returns:
        A Measurement holding ``Measured(ms)`` on success, or
        ``Failed`` if the operation raised.  Candidate exceptions never
        escape; only an invalid *cycles* raises ConfigurationError.
    """
    if cycles < 1:
        raise ConfigurationError(f"cycles must be a positive integer (got {cycles}).")

    try:
        await call_operation(operation)  # warm-up

        start = time.perf_counter()
        for _ in range(cycles):
            await call_operation(operation)
        total_s = time.perf_counter() - start
    except ValidationFailure as exc:
        log.error("%s: invalid output: %s", name, exc)
        return Measurement(name=name, elapsed=Failed(reason=str(exc), kind="invalid"))
    except (Exception, SystemExit) as exc:  # noqa: BLE001
        log.error("%s: crashed: %s: %s", name, type(exc).__name__, exc)
        log.debug("%s: crash traceback", name, exc_info=True)
        return Measurement(
            name=name,
            elapsed=Failed(reason=f"{type(exc).__name__}: {exc}", kind="crash"),
        )

    elapsed_ms = max(total_s, 0.0) * 1000 / cycles
    log.info("%s: %.2f ms", name, elapsed_ms)
    return Measurement(name=name, elapsed=Measured(elapsed_ms))
