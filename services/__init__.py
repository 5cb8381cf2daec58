"""
Business logic services.

Each service handles one step of the mapping suggestion pipeline.
"""

from services.record_store_service import (
    RecordStoreService,
    get_record_store_service,
    preload_owned_pairs,
)
from services.value_pair_service import build_value_pairs
from services.pass_through_service import (
    DecisionKind,
    PassThroughReason,
    MappingDecision,
    decide,
    is_pass_through_sufficient,
)
from services.suggestion_client_service import (
    SuggestionClient,
    HttpSuggestionClient,
    ClaudeSuggestionClient,
    get_suggestion_client,
    is_no_transformation,
)
from services.quality_assessment_service import MappingQualityAssessor, get_quality_assessor
from services.progress_service import (
    ProgressSink,
    LogProgressSink,
    SupabaseProgressSink,
    ProgressTracker,
    get_progress_sink,
)
from services.mapping_suggestion_service import (
    CancellationToken,
    SuggestionContext,
    build_default_context,
    suggest_mappings,
    suggest_mapping,
    cancel_run,
)

__all__ = [
    "RecordStoreService",
    "get_record_store_service",
    "preload_owned_pairs",
    "build_value_pairs",
    "DecisionKind",
    "PassThroughReason",
    "MappingDecision",
    "decide",
    "is_pass_through_sufficient",
    "SuggestionClient",
    "HttpSuggestionClient",
    "ClaudeSuggestionClient",
    "get_suggestion_client",
    "is_no_transformation",
    "MappingQualityAssessor",
    "get_quality_assessor",
    "ProgressSink",
    "LogProgressSink",
    "SupabaseProgressSink",
    "ProgressTracker",
    "get_progress_sink",
    "CancellationToken",
    "SuggestionContext",
    "build_default_context",
    "suggest_mappings",
    "suggest_mapping",
    "cancel_run",
]
