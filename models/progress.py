"""
Progress schemas for mapping suggestion runs.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RunStatus(str, Enum):
    """Run lifecycle."""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


class ItemStatus(str, Enum):
    """Lifecycle of one candidate within a run."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ItemProcessingOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class ItemProgress(BaseModel):
    """Start/end markers of one processed candidate."""
    sequence: int
    key: str
    status: ItemStatus = ItemStatus.IN_PROGRESS
    outcome: Optional[ItemProcessingOutcome] = None
    started_at: datetime
    ended_at: Optional[datetime] = None


class ProcessingState(BaseModel):
    """Observable state of one run. Never part of the returned suggestions."""
    run_id: str
    activity: str
    status: RunStatus = RunStatus.NOT_STARTED
    expected_progress: Optional[int] = None
    items: list[ItemProgress] = Field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def success_count(self) -> int:
        return sum(1 for i in self.items if i.outcome == ItemProcessingOutcome.SUCCESS)

    @property
    def failure_count(self) -> int:
        return sum(1 for i in self.items if i.outcome == ItemProcessingOutcome.FAILURE)
