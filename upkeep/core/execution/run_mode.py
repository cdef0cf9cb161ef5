"""
Run mode — the single switch between previewing and doing.

Every command an update step builds goes through an executor bound to
one RunMode.  The mode is chosen once at startup and never changes for
the rest of the run.
"""

from __future__ import annotations

from enum import Enum


class RunMode(str, Enum):
    """Whether commands are previewed or actually spawned."""

    SIMULATE = "simulate"
    EXECUTE = "execute"

    @classmethod
    def from_flag(cls, dry_run: bool) -> RunMode:
        return cls.SIMULATE if dry_run else cls.EXECUTE

    @property
    def simulate(self) -> bool:
        return self is RunMode.SIMULATE
