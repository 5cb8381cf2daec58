"""
Mapping suggestion orchestrator.

For every attribute match, in input order:
    value pairs → pass-through heuristic → (maybe) suggestion service
    → quality assessment → MappingSuggestion

A failing match is logged, recorded as a failed item and dropped; the run
goes on. Only cancellation and progress persistence errors abort a run.
"""

import threading
from dataclasses import dataclass, field
from typing import Optional
from uuid import uuid4
import structlog

from models.mapping import (
    AttributeMatch,
    MappingSuggestion,
    MappingsSuggestion,
    OwnedRecordPair,
    OwnedRecordRef,
    ValuePair,
    describe_match,
)
from models.progress import ItemProcessingOutcome
from services.pass_through_service import (
    DecisionKind,
    MappingDecision,
    PassThroughReason,
    decide,
)
from services.progress_service import ProgressSink, ProgressTracker, get_progress_sink
from services.quality_assessment_service import MappingQualityAssessor, get_quality_assessor
from services.record_store_service import (
    RecordStoreService,
    get_record_store_service,
    preload_owned_pairs,
)
from services.suggestion_client_service import (
    SuggestionClient,
    get_suggestion_client,
    is_no_transformation,
)
from services.value_pair_service import build_value_pairs
from exceptions import RunAlreadyActiveError, RunCancelledError, SuggestionServiceError
from utils.item_paths import last_name, rest, strip_prefixes

logger = structlog.get_logger(__name__)

ID_MAPPINGS_SUGGESTION = "mappingsSuggestion"


class CancellationToken:
    """Cooperative cancellation flag; may be set from another thread."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class SuggestionContext:
    """Collaborators of one run."""
    record_store: Optional[RecordStoreService]
    suggestion_client: Optional[SuggestionClient]
    quality_assessor: MappingQualityAssessor
    progress_sink: ProgressSink
    cancellation: CancellationToken = field(default_factory=CancellationToken)
    run_id: str = field(default_factory=lambda: str(uuid4()))

    def check_if_can_run(self) -> None:
        """
        Raises:
            RunCancelledError: If the run was cancelled
        """
        if self.cancellation.is_cancelled:
            raise RunCancelledError(self.run_id)


def build_default_context(run_id: Optional[str] = None) -> SuggestionContext:
    """
    Context wired to the configured collaborators.

    A caller-supplied run id lets the caller follow and cancel the run
    while it is still in progress; otherwise a fresh one is generated.

    A missing record store or suggestion service does not prevent a run:
    without a store there are no examples, and without a service every
    match that needs one fails on its own.
    """
    try:
        record_store = get_record_store_service()
    except Exception as e:
        logger.warning("record_store_unavailable", error=str(e))
        record_store = None

    try:
        suggestion_client = get_suggestion_client()
    except SuggestionServiceError as e:
        logger.warning("suggestion_service_not_configured", error=e.message)
        suggestion_client = None

    ctx = SuggestionContext(
        record_store=record_store,
        suggestion_client=suggestion_client,
        quality_assessor=get_quality_assessor(),
        progress_sink=get_progress_sink(),
    )
    if run_id:
        ctx.run_id = run_id
    return ctx


# ===================
# ORCHESTRATION
# ===================

def suggest_mappings(
    ctx: SuggestionContext,
    matches: list[AttributeMatch],
    owned_refs: Optional[list[OwnedRecordRef]]
) -> MappingsSuggestion:
    """
    Suggest mappings for all matches.

    Args:
        ctx: Run collaborators, cancellation token and run id
        matches: Candidate attribute matches, processed in this order
        owned_refs: Sampled account/owner references used as examples

    Returns:
        One suggestion per successfully processed match, in input order

    Raises:
        RunCancelledError: If the run is cancelled
        ProgressPersistenceError: If progress cannot be flushed
    """
    ctx.check_if_can_run()

    if not matches:
        logger.warning("no_matches_returning_empty_suggestion", run_id=ctx.run_id)
        return MappingsSuggestion()

    logger.info(
        "mappings_suggestion_started",
        run_id=ctx.run_id,
        matches=len(matches),
        owned_refs=len(owned_refs) if owned_refs else 0
    )

    tracker = ProgressTracker(ctx.run_id, ID_MAPPINGS_SUGGESTION, ctx.progress_sink)
    tracker.set_expected_progress(len(matches))
    try:
        suggestion = MappingsSuggestion()
        loaded = _preload(ctx, owned_refs)

        for match in matches:
            item = tracker.record_processing_start(match.source_attribute.name)
            tracker.flush()
            try:
                value_pairs = build_value_pairs(loaded, match.source_path, match.target_path)
                suggestion.attribute_mappings.append(suggest_mapping(ctx, match, value_pairs))
                tracker.record_processing_end(item, ItemProcessingOutcome.SUCCESS)
            except Exception as e:
                # TODO Emit an error-marked suggestion once clients can display one
                logger.error(
                    "mapping_suggestion_failed",
                    run_id=ctx.run_id,
                    error=str(e),
                    error_type=type(e).__name__,
                    **describe_match(match)
                )
                tracker.record_processing_end(item, ItemProcessingOutcome.FAILURE)
            ctx.check_if_can_run()

        logger.info(
            "mappings_suggestion_completed",
            run_id=ctx.run_id,
            suggested=len(suggestion),
            failed=tracker.state.failure_count
        )
        return suggestion

    except Exception as e:
        logger.error(
            "mappings_suggestion_aborted",
            run_id=ctx.run_id,
            error=str(e),
            error_type=type(e).__name__
        )
        tracker.record_exception(e)
        raise
    finally:
        tracker.close()


def _preload(ctx: SuggestionContext, owned_refs: Optional[list[OwnedRecordRef]]) -> list[OwnedRecordPair]:
    """Examples are optional: any failure means no examples."""
    if not owned_refs:
        return []
    if ctx.record_store is None:
        logger.warning("owned_records_preload_skipped", run_id=ctx.run_id, reason="no_record_store")
        return []
    try:
        return preload_owned_pairs(owned_refs, ctx.record_store)
    except Exception as e:
        logger.error(
            "owned_records_preload_failed",
            run_id=ctx.run_id,
            error=str(e),
            error_type=type(e).__name__
        )
        return []


def suggest_mapping(
    ctx: SuggestionContext,
    match: AttributeMatch,
    value_pairs: list[ValuePair]
) -> MappingSuggestion:
    """Decide the transformation for one match and score it."""
    logger.debug(
        "suggesting_mapping",
        value_pairs=len(value_pairs),
        **describe_match(match)
    )

    decision = decide(value_pairs, match.target_type)
    if decision.kind == DecisionKind.NEEDS_EXTERNAL_SUGGESTION:
        decision = _ask_suggestion_service(ctx, match, value_pairs)

    transformation = decision.transformation
    quality = ctx.quality_assessor.assess_mapping_quality(
        value_pairs, transformation, match.target_type
    )

    return MappingSuggestion(
        match=match,
        transformation=transformation,
        expected_quality=quality,
        mapping_name=f"{last_name(match.source_path)}-to-{match.target_path}",
        source_ref=rest(match.source_path),
        target_path=strip_prefixes(match.target_path),
    )


def _ask_suggestion_service(
    ctx: SuggestionContext,
    match: AttributeMatch,
    value_pairs: list[ValuePair]
) -> MappingDecision:
    if ctx.suggestion_client is None:
        raise SuggestionServiceError("No suggestion service configured")

    source_name = match.source_attribute.name
    target_name = match.target_attribute.name
    script = ctx.suggestion_client.suggest(
        match.source_attribute,
        match.target_attribute,
        True,
        [pair.to_example(source_name, target_name) for pair in value_pairs]
    )

    if is_no_transformation(script):
        logger.debug("service_returned_identity", script=script, source_path=match.source_path)
        return MappingDecision.pass_through(PassThroughReason.SERVICE_IDENTITY)

    logger.debug("service_returned_script", source_path=match.source_path, script=script)
    return MappingDecision.transform(script)


# ===================
# RUN REGISTRY
# ===================

_active_runs: dict[str, CancellationToken] = {}
_active_runs_lock = threading.Lock()


def register_run(ctx: SuggestionContext) -> None:
    """
    Make a run cancellable by id.

    Raises:
        RunAlreadyActiveError: If a run with the same id is in progress
    """
    with _active_runs_lock:
        if ctx.run_id in _active_runs:
            raise RunAlreadyActiveError(ctx.run_id)
        _active_runs[ctx.run_id] = ctx.cancellation


def unregister_run(run_id: str) -> None:
    with _active_runs_lock:
        _active_runs.pop(run_id, None)


def cancel_run(run_id: str) -> bool:
    """
    Request cancellation of an active run.

    Returns:
        True if the run was active, False otherwise
    """
    with _active_runs_lock:
        token = _active_runs.get(run_id)
    if token is None:
        return False
    token.cancel()
    logger.info("run_cancellation_requested", run_id=run_id)
    return True
