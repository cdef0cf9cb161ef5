"""
Subprocess spawner — the SINGLE place where processes are started.

stdin and stderr are always inherited so interactive tools (sudo
prompts, progress bars) keep working.  stdout is inherited too unless
the caller asks to capture it, or sends it to stderr so that our own
stdout stays machine-readable (``upkeep run --json``).
"""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)

# Process-level stderr, independent of any sys.stderr replacement
_STDERR_FD = 2


def subprocess_spawner(
    argv: list[str],
    *,
    cwd: str | None = None,
    capture: bool = False,
    stdout_to_stderr: bool = False,
) -> subprocess.Popen[str]:
    """Start *argv* and return the live process.

    Raises:
        OSError: The binary is missing, not executable, or cwd is invalid.
    """
    logger.debug("Spawning: %s (cwd=%s, capture=%s)", argv, cwd, capture)
    if capture:
        stdout = subprocess.PIPE
    elif stdout_to_stderr:
        stdout = _STDERR_FD
    else:
        stdout = None
    return subprocess.Popen(argv, cwd=cwd, stdout=stdout, text=True)


def stderr_spawner(
    argv: list[str],
    *,
    cwd: str | None = None,
    capture: bool = False,
) -> subprocess.Popen[str]:
    """Like ``subprocess_spawner``, with uncaptured tool output on stderr."""
    return subprocess_spawner(argv, cwd=cwd, capture=capture, stdout_to_stderr=True)
