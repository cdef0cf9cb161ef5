"""
Step runner — the orchestration loop.

Walks the step catalogue one step at a time, turns whatever each step
raises into a StepResult, and collects the results into a RunReport.
One step's failure never stops the run.

Flow:
    catalogue → filter (platform, only/disable) → run step → classify → report
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from upkeep.core.execution.context import ExecutionContext
from upkeep.core.execution.errors import (
    ProcessFailed,
    SkipStep,
    SpawnFailed,
    StepError,
)
from upkeep.core.models.result import StepResult

if TYPE_CHECKING:
    from upkeep.steps import StepSpec

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Result of one full run."""

    dry_run: bool = False
    results: list[StepResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.skipped)

    @property
    def failures(self) -> list[StepResult]:
        return [r for r in self.results if r.failed]

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "ok"
        if self.succeeded > 0:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "dry_run": self.dry_run,
            "status": self.status,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "results": [r.model_dump(mode="json") for r in self.results],
        }


def run_step(ctx: ExecutionContext, spec: StepSpec) -> StepResult:
    """Run one step and classify its outcome. Never raises ``Exception``."""
    start = time.monotonic()
    separators_before = len(ctx.sink.separators)

    try:
        spec.func(ctx)
    except SkipStep as e:
        result = StepResult.skip(spec.key, e.reason)
    except ProcessFailed as e:
        result = StepResult.failure(
            spec.key, "process_failed", str(e), exit_code=e.exit_code,
            metadata={"command": e.command.display()},
        )
    except SpawnFailed as e:
        result = StepResult.failure(
            spec.key, "spawn_failed", str(e),
            metadata={"command": e.command.display()},
        )
    except StepError as e:
        result = StepResult.failure(spec.key, "fatal", str(e))
    except Exception as e:
        logger.exception("Step %s raised unexpectedly", spec.key)
        result = StepResult.failure(spec.key, "fatal", f"Unexpected error: {e}")
    else:
        result = StepResult.success(spec.key)

    # The title the step announced, if it got that far
    announced = ctx.sink.separators[separators_before:]
    if announced:
        result.title = announced[-1]
    result.duration_ms = int((time.monotonic() - start) * 1000)

    status_marker = "✓" if result.ok else "✗" if result.failed else "⊘"
    logger.info("%s %s → %s %s", status_marker, spec.key, result.status, result.message)
    return result


def run_steps(
    ctx: ExecutionContext,
    steps: Iterable[StepSpec] | None = None,
) -> RunReport:
    """Run every applicable step in order.

    Args:
        ctx: The run's execution context.
        steps: Catalogue to walk (default: the full ``STEPS`` list).

    Returns:
        RunReport with one StepResult per step that was attempted.
    """
    if steps is None:
        from upkeep.steps import STEPS

        steps = STEPS

    report = RunReport(dry_run=ctx.run_mode.simulate)

    for spec in steps:
        if not spec.applies_to(ctx.host):
            logger.debug("Step %s does not apply to %s", spec.key, ctx.host.system)
            continue
        if not ctx.config.should_run(spec.name):
            logger.debug("Step %s disabled by configuration", spec.key)
            continue
        report.results.append(run_step(ctx, spec))

    return report
