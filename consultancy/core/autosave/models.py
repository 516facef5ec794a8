"""
Value types exchanged by the auto-save scheduler.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from consultancy.utils.constants import SchedulerPhase


class PersistOutcome(BaseModel):
    """Result of a single persist attempt, handed back to callers for UI feedback."""

    model_config = ConfigDict(frozen=True)

    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "PersistOutcome":
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> "PersistOutcome":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class SchedulerState:
    """Read-only view of a scheduler's bookkeeping."""

    last_persisted_snapshot: Any = None
    has_observed_first_value: bool = False
    in_flight: bool = False
    queued_snapshot: Any = None
    has_queued_snapshot: bool = False
    phase: SchedulerPhase = SchedulerPhase.IDLE
    closed: bool = False
