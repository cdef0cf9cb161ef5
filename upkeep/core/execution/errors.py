"""
Step error taxonomy.

A step body is written as "succeed or propagate": executor helpers
raise one of these, and the step loop turns whatever comes out of the
step into a StepResult.  The loop never matches on message strings:

    SkipStep       prerequisite absent — step omitted, not a failure
    ProcessFailed  the tool ran and reported failure
    SpawnFailed    the tool could not be started at all
    FatalStepError anything else the step chose to surface explicitly

Any other exception escaping a step is also recorded as fatal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from upkeep.core.execution.command import Command


class StepError(Exception):
    """Base class for everything a step may raise on purpose."""

    kind: str = "fatal"


class SkipStep(StepError):
    """The step's prerequisite is missing. Not reported as a failure."""

    kind = "skip"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ProcessFailed(StepError):
    """An external tool exited with an unacceptable status."""

    kind = "process_failed"

    def __init__(self, command: Command, exit_code: int):
        super().__init__(f"`{command.display()}` failed with exit code {exit_code}")
        self.command = command
        self.exit_code = exit_code


class SpawnFailed(StepError):
    """The process could not be started (missing binary, permissions...)."""

    kind = "spawn_failed"

    def __init__(self, command: Command, error: OSError):
        super().__init__(f"Could not start `{command.display()}`: {error}")
        self.command = command
        self.error = error


class FatalStepError(StepError):
    """Unexpected problem inside a step, e.g. malformed tool config."""

    kind = "fatal"

    def __init__(self, message: str, error: BaseException | None = None):
        super().__init__(message)
        self.error = error
