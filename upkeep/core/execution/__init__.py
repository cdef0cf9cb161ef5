"""Execution core — run mode, commands, executor, probes, context.

    from upkeep.core.execution import Command, ExecutionContext, require
"""

from upkeep.core.execution.command import Command
from upkeep.core.execution.context import BaseDirs, ExecutionContext
from upkeep.core.execution.errors import (
    FatalStepError,
    ProcessFailed,
    SkipStep,
    SpawnFailed,
    StepError,
)
from upkeep.core.execution.executor import (
    Completed,
    ExecutionOutcome,
    Executor,
    ProcessHandle,
    Simulated,
    SpawnFailure,
    accept_codes,
)
from upkeep.core.execution.report import ReportEntry, ReportSink
from upkeep.core.execution.requirements import (
    Found,
    Missing,
    require,
    require_option,
    require_path,
)
from upkeep.core.execution.run_mode import RunMode

__all__ = [
    "BaseDirs",
    "Command",
    "Completed",
    "ExecutionContext",
    "ExecutionOutcome",
    "Executor",
    "FatalStepError",
    "Found",
    "Missing",
    "ProcessFailed",
    "ProcessHandle",
    "ReportEntry",
    "ReportSink",
    "RunMode",
    "Simulated",
    "SkipStep",
    "SpawnFailed",
    "SpawnFailure",
    "StepError",
    "accept_codes",
    "require",
    "require_option",
    "require_path",
]
