"""
Mapping suggestion API routes.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.mapping import (
    CancelRunResponse,
    MappingSuggestionRequest,
    MappingsSuggestionResponse,
    OwnedRecordRef,
)
from models.progress import ProcessingState
from services.mapping_suggestion_service import (
    SuggestionContext,
    build_default_context,
    cancel_run,
    register_run,
    suggest_mappings,
    unregister_run,
)
from services.progress_service import get_progress_sink
from exceptions import AppError, RunNotFoundError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def _sample_owned_refs(ctx: SuggestionContext, data: MappingSuggestionRequest) -> list[OwnedRecordRef]:
    """Examples are optional; sampling problems mean no examples."""
    if ctx.record_store is None:
        return []
    try:
        return ctx.record_store.sample_owned_refs(data.resource_id, data.object_type)
    except Exception as e:
        logger.error(
            "owned_refs_sampling_failed",
            resource_id=data.resource_id,
            object_type=data.object_type,
            error=str(e)
        )
        return []


# ===================
# ROUTES
# ===================

# Plain def: the run blocks, so it goes to the threadpool and cancel requests stay served
@router.post("", response_model=MappingsSuggestionResponse)
def create_mapping_suggestions(data: MappingSuggestionRequest):
    """
    Suggest mappings for the given attribute matches.

    Owned record references are sampled from the store when not provided.
    Pass run_id to follow (GET /runs/{run_id}) or cancel the run while
    this request is still in progress.

    Raises:
        409: Run cancelled, or a run with this id is already in progress
        500: Progress could not be persisted
    """
    try:
        ctx = build_default_context(data.run_id)

        register_run(ctx)
        try:
            owned_refs = data.owned_records
            if data.matches and owned_refs is None:
                owned_refs = _sample_owned_refs(ctx, data)

            result = suggest_mappings(ctx, data.matches, owned_refs)
        finally:
            unregister_run(ctx.run_id)

        return MappingsSuggestionResponse(
            run_id=ctx.run_id,
            suggestions=result.attribute_mappings,
            total=len(result)
        )

    except Exception as e:
        return handle_error(e)


@router.get("/runs/{run_id}", response_model=ProcessingState)
async def get_run(run_id: str):
    """
    Get progress of a run.

    Raises:
        404: Run not found
    """
    try:
        state = get_progress_sink().load(run_id)
        if state is None:
            raise RunNotFoundError(run_id)
        return state

    except Exception as e:
        return handle_error(e)


@router.post("/runs/{run_id}/cancel", response_model=CancelRunResponse, status_code=202)
async def cancel_mapping_suggestion_run(run_id: str):
    """
    Request cancellation of a running run.

    The run stops after the match it is currently processing.

    Raises:
        404: Run not active
    """
    try:
        if not cancel_run(run_id):
            raise RunNotFoundError(run_id)
        return CancelRunResponse(run_id=run_id, cancelled=True)

    except Exception as e:
        return handle_error(e)
