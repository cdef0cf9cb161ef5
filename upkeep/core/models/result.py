"""
StepResult — the outcome of one step invocation.

This is the contract between a step and the step loop.  The loop
converts whatever a step raised into one of these; it never raises
itself.  Skip and failure are distinct ``status`` values, and
``kind`` tells the failures apart.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

StepStatus = Literal["ok", "skipped", "failed"]
StepKind = Literal["success", "skip", "process_failed", "spawn_failed", "fatal"]


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class StepResult(BaseModel):
    """Result of running one update step."""

    step: str
    title: str = ""
    status: StepStatus = "ok"
    kind: StepKind = "success"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    message: str = ""                   # skip reason or error text
    exit_code: int | None = None        # set for process_failed

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, step: str, **kwargs: Any) -> StepResult:
        return cls(step=step, status="ok", kind="success", **kwargs)

    @classmethod
    def skip(cls, step: str, reason: str, **kwargs: Any) -> StepResult:
        return cls(step=step, status="skipped", kind="skip", message=reason, **kwargs)

    @classmethod
    def failure(
        cls,
        step: str,
        kind: Literal["process_failed", "spawn_failed", "fatal"],
        message: str,
        **kwargs: Any,
    ) -> StepResult:
        return cls(step=step, status="failed", kind=kind, message=message, **kwargs)
