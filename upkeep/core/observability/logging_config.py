"""
Logging configuration — one setup call per process.

The CLI calls ``setup_logging`` once before any step runs.  Every
module that does ``logger = logging.getLogger(__name__)`` inherits it.

Console level precedence:
    --debug  >  --verbose  >  --quiet  >  UPKEEP_LOG_LEVEL  >  WARNING

Logs go to stderr so they never mix into captured tool output or
``--json`` reports.  A log file can be added with UPKEEP_LOG_FILE
(and UPKEEP_LOG_FILE_LEVEL).
"""

from __future__ import annotations

import logging
import os
import sys

_FMT_CONSOLE = "%(message)s"
_FMT_CONSOLE_INFO = "[%(name)s] %(message)s"
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

LEVEL_ENV = "UPKEEP_LOG_LEVEL"
FILE_ENV = "UPKEEP_LOG_FILE"
FILE_LEVEL_ENV = "UPKEEP_LOG_FILE_LEVEL"


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level name from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LEVEL_ENV, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a log file, always in full detail.
        log_file_level: Level for the file. Defaults to ``level``.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        formatter = logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_DEBUG)
    elif numeric_level <= logging.INFO:
        formatter = logging.Formatter(_FMT_CONSOLE_INFO)
    else:
        formatter = logging.Formatter(_FMT_CONSOLE)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)
    logging.raiseExceptions = False


def setup_from_flags(debug: bool = False, verbose: bool = False, quiet: bool = False) -> None:
    """``setup_logging`` driven by CLI flags and UPKEEP_LOG_* variables."""
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(FILE_ENV),
        log_file_level=os.environ.get(FILE_LEVEL_ENV),
    )


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (WARNING if unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
