"""
Execution context — everything a step may consult, built once per run.

Steps receive the context by reference and never build their own run
mode, executor or elevation command.  That guarantees one mode and one
elevation path for the whole run.

The context is read-only after construction, with two exceptions that
are invisible to steps: the reporting sink (append-only) and the memo
slots filled on first demand (elevation prefix, variant resolution).
Both live on the instance, so tests can build independent contexts.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from upkeep.adapters.base import Spawner
from upkeep.adapters.shell.process import subprocess_spawner
from upkeep.core.config.loader import config_dir
from upkeep.core.execution.command import Command
from upkeep.core.execution.errors import SkipStep
from upkeep.core.execution.executor import (
    ExecutionOutcome,
    Executor,
    ExitPredicate,
    ProcessHandle,
)
from upkeep.core.execution.report import ReportSink
from upkeep.core.execution.requirements import require
from upkeep.core.execution.run_mode import RunMode
from upkeep.core.models.config import UpkeepConfig
from upkeep.core.platform import Host

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Tried in order when no elevation command is configured
ELEVATION_CANDIDATES = ("sudo", "doas", "pkexec")


@dataclass(frozen=True)
class BaseDirs:
    """User base directories."""

    home: Path
    config: Path

    @classmethod
    def discover(cls) -> BaseDirs:
        home = Path.home()
        return cls(home=home, config=config_dir(home))


class ExecutionContext:
    """Run-wide state shared by every step."""

    def __init__(
        self,
        config: UpkeepConfig,
        base_dirs: BaseDirs,
        run_mode: RunMode,
        *,
        host: Host | None = None,
        sink: ReportSink | None = None,
        spawner: Spawner = subprocess_spawner,
    ):
        self._config = config
        self._base_dirs = base_dirs
        self._run_mode = run_mode
        self._host = host or Host.detect()
        self._sink = sink if sink is not None else ReportSink()
        self._elevation: list[str] | None = None
        self._memo: dict[str, Any] = {}
        self._executor = Executor(
            run_mode,
            self._sink,
            elevation=self.elevation_prefix,
            spawner=spawner,
        )

    @classmethod
    def build(
        cls,
        config: UpkeepConfig,
        dry_run: bool | None = None,
        **kwargs: Any,
    ) -> ExecutionContext:
        """Build the context for a real run.

        ``dry_run`` overrides the config's own ``dry_run`` when given.
        """
        mode = RunMode.from_flag(config.dry_run if dry_run is None else dry_run)
        return cls(config, BaseDirs.discover(), mode, **kwargs)

    # ── Accessors ───────────────────────────────────────────────

    @property
    def config(self) -> UpkeepConfig:
        return self._config

    @property
    def base_dirs(self) -> BaseDirs:
        return self._base_dirs

    @property
    def run_mode(self) -> RunMode:
        return self._run_mode

    @property
    def host(self) -> Host:
        return self._host

    @property
    def sink(self) -> ReportSink:
        return self._sink

    @property
    def executor(self) -> Executor:
        return self._executor

    # ── Elevation ───────────────────────────────────────────────

    def elevation_prefix(self) -> list[str]:
        """Command prefix for elevated commands, resolved on first use.

        Empty when already running as root.

        Raises:
            SkipStep: No elevation helper is available.
        """
        if self._elevation is None:
            self._elevation = self._resolve_elevation()
            logger.debug("Elevation prefix: %s", self._elevation)
        return list(self._elevation)

    def _resolve_elevation(self) -> list[str]:
        if self._host.is_root:
            return []
        if self._config.elevation:
            return [str(require(self._config.elevation).unwrap())]
        for candidate in ELEVATION_CANDIDATES:
            probe = require(candidate)
            if probe.found:
                return [str(probe.unwrap())]
        raise SkipStep(
            f"No elevation helper found in PATH (tried {', '.join(ELEVATION_CANDIDATES)})"
        )

    def execute_elevated(self, program: str | Path) -> Command:
        """A command that runs *program* through the elevation prefix."""
        return Command(program).elevate()

    # ── Memo ────────────────────────────────────────────────────

    def resolve_once(self, key: str, resolver: Callable[[], T]) -> T:
        """Evaluate *resolver* on first request for *key*, then reuse it."""
        if key not in self._memo:
            self._memo[key] = resolver()
        return self._memo[key]

    # ── Executor pass-through ───────────────────────────────────

    def run(self, command: Command, capture: bool = False) -> ExecutionOutcome:
        return self._executor.run(command, capture=capture)

    def spawn(self, command: Command, capture: bool = False) -> ProcessHandle:
        return self._executor.spawn(command, capture=capture)

    def check_run(
        self, command: Command, accept: ExitPredicate | None = None
    ) -> ExecutionOutcome:
        return self._executor.check_run(command, accept=accept)

    def check_output(
        self, command: Command, accept: ExitPredicate | None = None
    ) -> str | None:
        return self._executor.check_output(command, accept=accept)

    def print_separator(self, title: str) -> None:
        self._sink.separator(title)
