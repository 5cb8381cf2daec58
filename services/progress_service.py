"""
Progress tracking for mapping suggestion runs.

The orchestrator talks to a ProgressTracker only through
set_expected_progress / record_processing_start / record_processing_end /
flush / record_exception / close. Where the state ends up is decided
by the sink.
"""

from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Optional
import structlog

from config import get_supabase_client, settings
from models.progress import (
    ItemProcessingOutcome,
    ItemProgress,
    ItemStatus,
    ProcessingState,
    RunStatus,
)
from exceptions import DatabaseError, ProgressPersistenceError

logger = structlog.get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ===================
# SINKS
# ===================

class ProgressSink(ABC):
    """Where run state is written on flush."""

    @abstractmethod
    def save(self, state: ProcessingState) -> None:
        ...

    @abstractmethod
    def load(self, run_id: str) -> Optional[ProcessingState]:
        """Latest saved state of a run, or None if unknown."""


class LogProgressSink(ProgressSink):
    """
    Keeps the latest states in memory and logs every flush.

    At most max_runs runs are kept; the least recently saved run is evicted.
    """

    def __init__(self, max_runs: Optional[int] = None):
        self.max_runs = max_runs or settings.progress_memory_runs
        self._states: OrderedDict[str, ProcessingState] = OrderedDict()

    def save(self, state: ProcessingState) -> None:
        self._states[state.run_id] = state.model_copy(deep=True)
        self._states.move_to_end(state.run_id)
        while len(self._states) > self.max_runs:
            evicted, _ = self._states.popitem(last=False)
            logger.debug("progress_state_evicted", run_id=evicted)
        logger.info(
            "progress_flushed",
            run_id=state.run_id,
            status=state.status.value,
            expected=state.expected_progress,
            processed=len(state.items),
            succeeded=state.success_count,
            failed=state.failure_count
        )

    def load(self, run_id: str) -> Optional[ProcessingState]:
        state = self._states.get(run_id)
        return state.model_copy(deep=True) if state else None


class SupabaseProgressSink(ProgressSink):
    """Upserts run state into the progress table, one row per run."""

    def __init__(self, client=None):
        self.db = client if client is not None else get_supabase_client()
        self.table = settings.progress_table

    def save(self, state: ProcessingState) -> None:
        row = {
            "run_id": state.run_id,
            "activity": state.activity,
            "status": state.status.value,
            "expected_progress": state.expected_progress,
            "state": state.model_dump(mode="json"),
        }
        try:
            self.db.table(self.table).upsert(row, on_conflict="run_id").execute()
        except Exception as e:
            logger.error(
                "progress_flush_failed",
                run_id=state.run_id,
                error=str(e),
                error_type=type(e).__name__
            )
            raise ProgressPersistenceError(state.run_id, str(e)) from e

    def load(self, run_id: str) -> Optional[ProcessingState]:
        try:
            result = (
                self.db.table(self.table)
                .select("state")
                .eq("run_id", run_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("progress_load_failed", run_id=run_id, error=str(e))
            raise DatabaseError("select", str(e), details={"table": self.table})

        if not result.data:
            return None
        return ProcessingState.model_validate(result.data[0]["state"])


# ===================
# TRACKER
# ===================

class ProgressTracker:
    """
    Mutable state of one run, owned by the orchestrator.

    Items are recorded in processing order.
    """

    def __init__(self, run_id: str, activity: str, sink: ProgressSink):
        self.sink = sink
        self.state = ProcessingState(
            run_id=run_id,
            activity=activity,
            status=RunStatus.RUNNING,
            started_at=_now()
        )

    def set_expected_progress(self, expected: int) -> None:
        self.state.expected_progress = expected

    def record_processing_start(self, key: str) -> ItemProgress:
        item = ItemProgress(
            sequence=len(self.state.items),
            key=key,
            status=ItemStatus.IN_PROGRESS,
            started_at=_now()
        )
        self.state.items.append(item)
        return item

    def record_processing_end(self, item: ItemProgress, outcome: ItemProcessingOutcome) -> None:
        item.outcome = outcome
        item.status = (
            ItemStatus.SUCCEEDED if outcome == ItemProcessingOutcome.SUCCESS else ItemStatus.FAILED
        )
        item.ended_at = _now()

    def flush(self) -> None:
        self.sink.save(self.state)

    def record_exception(self, exc: BaseException) -> None:
        self.state.status = RunStatus.ABORTED
        self.state.error = str(exc)
        self.state.error_type = type(exc).__name__

    def close(self) -> None:
        """Set the terminal status and flush once more."""
        if self.state.status == RunStatus.RUNNING:
            self.state.status = RunStatus.COMPLETED
        self.state.finished_at = _now()
        self.flush()


# Singleton instance for convenience
_progress_sink: Optional[ProgressSink] = None


def get_progress_sink() -> ProgressSink:
    """Supabase sink when persistence is enabled and configured, log sink otherwise."""
    global _progress_sink
    if _progress_sink is None:
        if settings.persist_progress and settings.supabase_configured:
            _progress_sink = SupabaseProgressSink()
        else:
            _progress_sink = LogProgressSink()
    return _progress_sink
