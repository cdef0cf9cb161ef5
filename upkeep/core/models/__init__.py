"""
Domain models — Pydantic types for upkeep.

    from upkeep.core.models import StepName, StepResult, UpkeepConfig
"""

from upkeep.core.models.config import StepName, UpkeepConfig
from upkeep.core.models.result import StepResult

__all__ = [
    "StepName",
    "StepResult",
    "UpkeepConfig",
]
