"""
Requirement resolver — read-only prerequisite probes.

Steps probe for their binary, marker files and session attributes
before doing anything.  A probe never spawns a process and never
changes state; calling it twice gives the same answer.

Probes return ``Found`` or ``Missing``.  ``Missing.unwrap()`` raises
SkipStep with the reason verbatim, which is the only way a step ends
early without counting as a failure:

    fish = require("fish").unwrap()
    require_path(home / ".bash_it").unwrap()
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, NoReturn, TypeVar

from upkeep.core.execution.errors import SkipStep

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Found(Generic[T]):
    value: T

    found = True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Missing:
    reason: str

    found = False

    def unwrap(self) -> NoReturn:
        raise SkipStep(self.reason)


def require(name: str, path: str | None = None) -> Found[Path] | Missing:
    """Locate an executable on the search path.

    Args:
        name: Binary name, or a path to a specific executable.
        path: Search path override (default: ``$PATH``).

    Returns:
        Found(absolute path) or Missing("<name>" not found in PATH).
    """
    resolved = shutil.which(name, path=path)
    if resolved is None:
        logger.debug("Requirement %s not found", name)
        return Missing(f'"{name}" not found in PATH')
    logger.debug("Requirement %s found at %s", name, resolved)
    return Found(Path(resolved).absolute())


def require_path(path: str | os.PathLike[str]) -> Found[Path] | Missing:
    """Existence check only: no permission or content validation."""
    p = Path(path)
    if not p.exists():
        return Missing(f"Path {str(p)!r} doesn't exist")
    return Found(p)


def require_option(value: T | None, reason: str) -> Found[T] | Missing:
    """Turn an already computed optional value into a probe result."""
    if value is None:
        return Missing(reason)
    return Found(value)
