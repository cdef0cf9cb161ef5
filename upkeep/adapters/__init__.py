"""Adapters — the process boundary.

Public re-exports for convenient access.
"""

from upkeep.adapters.base import RunningProcess, Spawner
from upkeep.adapters.mock import MockProcess, MockSpawner
from upkeep.adapters.shell.process import stderr_spawner, subprocess_spawner

__all__ = [
    "MockProcess",
    "MockSpawner",
    "RunningProcess",
    "Spawner",
    "stderr_spawner",
    "subprocess_spawner",
]
