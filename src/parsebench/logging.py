"""Logging setup for parsebench.

The console shows the run as it happens: one line per timed candidate
(``csv.reader: 12.34 ms``), skips, and crashes.  Routine lines are printed
bare; warnings and errors carry their level so a crashed candidate stands
out in a long run.  An optional log file records everything at DEBUG,
crash tracebacks included, with timestamps and logger names.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "parsebench"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class ConsoleFormatter(logging.Formatter):
    """Bare messages below WARNING, ``LEVEL: message`` from WARNING up."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            return f"{record.levelname}: {message}"
        return message


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure and return the parsebench logger.

    Args:
        verbose: Console shows DEBUG lines (per-candidate progress).
        quiet: Console shows warnings and errors only.  Ignored if
            *verbose* is True.
        log_file: If provided, also log everything at DEBUG to this path.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    console = logging.StreamHandler()
    if verbose:
        console.setLevel(logging.DEBUG)
    elif quiet:
        console.setLevel(logging.WARNING)
    else:
        console.setLevel(logging.INFO)
    console.setFormatter(ConsoleFormatter("%(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(fh)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a named child logger under the parsebench namespace."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")
