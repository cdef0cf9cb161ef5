"""
Executor — binds commands to a run mode.

This is the one path from a step to a real process.  In SIMULATE mode
nothing is spawned: the command line goes to the reporting sink and
the outcome is ``Simulated``.  In EXECUTE mode the command is started
through the spawner and waited on.

Outcomes are plain values (``Simulated``, ``Completed``,
``SpawnFailure``).  The ``check_*`` helpers turn a bad outcome into a
step error so most call sites read as "succeed or propagate":

    ctx.check_run(brew.arg("update"))
    ctx.check_run(asdf.arg("update"), accept=accept_codes(42))
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import IO, Union

from upkeep.adapters.base import RunningProcess, Spawner
from upkeep.adapters.shell.process import subprocess_spawner
from upkeep.core.execution.command import Command
from upkeep.core.execution.errors import ProcessFailed, SpawnFailed
from upkeep.core.execution.report import ReportSink
from upkeep.core.execution.run_mode import RunMode

logger = logging.getLogger(__name__)

ExitPredicate = Callable[[int], bool]


def success_only(code: int) -> bool:
    """Default exit policy: only 0 is acceptable."""
    return code == 0


def accept_codes(*codes: int) -> ExitPredicate:
    """Exit policy accepting 0 plus the given tool-specific codes."""
    allowed = frozenset(codes)

    def predicate(code: int) -> bool:
        return code == 0 or code in allowed

    return predicate


# ── Outcomes ────────────────────────────────────────────────────


@dataclass(frozen=True)
class Simulated:
    """Nothing ran. Counts as success for control flow."""

    success = True

    def check(self, command: Command, accept: ExitPredicate | None = None) -> Simulated:
        return self


@dataclass(frozen=True)
class Completed:
    """The process ran to completion."""

    exit_code: int
    output: str | None = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def check(self, command: Command, accept: ExitPredicate | None = None) -> Completed:
        if not (accept or success_only)(self.exit_code):
            raise ProcessFailed(command, self.exit_code)
        return self


@dataclass(frozen=True)
class SpawnFailure:
    """The process could not be started."""

    error: OSError

    success = False

    def check(self, command: Command, accept: ExitPredicate | None = None) -> SpawnFailure:
        raise SpawnFailed(command, self.error)


ExecutionOutcome = Union[Simulated, Completed, SpawnFailure]


class ProcessHandle:
    """A started (or simulated) process.

    ``stdout`` is readable while the process runs when it was spawned
    with ``capture=True``; ``wait()`` blocks until exit and returns the
    outcome.  Output already consumed through ``stdout`` is not
    repeated in ``Completed.output``.
    """

    def __init__(
        self,
        command: Command,
        process: RunningProcess | None = None,
        outcome: ExecutionOutcome | None = None,
    ):
        self.command = command
        self._process = process
        self._outcome = outcome

    @property
    def stdout(self) -> IO[str] | None:
        return self._process.stdout if self._process is not None else None

    def wait(self) -> ExecutionOutcome:
        if self._outcome is None:
            assert self._process is not None
            output, _ = self._process.communicate()
            code = self._process.returncode
            assert code is not None
            logger.debug("`%s` exited with %d", self.command.display(), code)
            self._outcome = Completed(exit_code=code, output=output)
        return self._outcome

    def check(self, accept: ExitPredicate | None = None) -> ExecutionOutcome:
        """Wait, then raise the matching step error on failure."""
        return self.wait().check(self.command, accept)


# ── Executor ────────────────────────────────────────────────────


class Executor:
    """Runs commands according to a fixed run mode.

    Args:
        run_mode: SIMULATE or EXECUTE, fixed for the executor's life.
        sink: Receives simulate-mode previews.
        elevation: Returns the prefix for elevated commands. Called
            only when an elevated command is actually run.
        spawner: Starts processes. Defaults to subprocess.
    """

    def __init__(
        self,
        run_mode: RunMode,
        sink: ReportSink,
        *,
        elevation: Callable[[], list[str]] | None = None,
        spawner: Spawner = subprocess_spawner,
    ):
        self._run_mode = run_mode
        self._sink = sink
        self._elevation = elevation
        self._spawner = spawner

    @property
    def run_mode(self) -> RunMode:
        return self._run_mode

    def prepare(self, command: Command) -> Command:
        """Apply the elevation prefix to elevated commands."""
        if not command.elevated:
            return command
        prefix = self._elevation() if self._elevation is not None else []
        return replace(command.prefixed(prefix), elevated=False)

    def spawn(self, command: Command, capture: bool = False) -> ProcessHandle:
        """Start *command* and return without waiting."""
        command = self.prepare(command)

        if self._run_mode.simulate:
            self._sink.preview(command.display())
            return ProcessHandle(command, outcome=Simulated())

        logger.debug("Executing: %s (cwd=%s)", command.display(), command.cwd)
        try:
            process = self._spawner(command.argv, cwd=command.cwd, capture=capture)
        except OSError as e:
            logger.warning("Could not start %s: %s", command.display(), e)
            return ProcessHandle(command, outcome=SpawnFailure(e))
        return ProcessHandle(command, process=process)

    def run(self, command: Command, capture: bool = False) -> ExecutionOutcome:
        """Run *command* to completion and return the raw outcome."""
        return self.spawn(command, capture=capture).wait()

    def check_run(
        self,
        command: Command,
        accept: ExitPredicate | None = None,
    ) -> ExecutionOutcome:
        """Run *command*; raise ProcessFailed / SpawnFailed on failure."""
        return self.spawn(command).check(accept)

    def check_output(
        self,
        command: Command,
        accept: ExitPredicate | None = None,
    ) -> str | None:
        """Run *command* capturing stdout.

        Returns the output text, or None in simulate mode where nothing
        ran and so there is no content to inspect.
        """
        outcome = self.spawn(command, capture=True).check(accept)
        if isinstance(outcome, Completed):
            return outcome.output or ""
        return None
