"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema, FrozenSchema
from models.mapping import (
    AttributeType,
    AttributeDescriptor,
    AttributeMatch,
    OwnedRecordRef,
    OwnedRecordPair,
    ValuePair,
    Transformation,
    MappingSuggestion,
    MappingsSuggestion,
    MappingSuggestionRequest,
    MappingsSuggestionResponse,
    CancelRunResponse,
)
from models.suggestion_service import (
    AttributeExample,
    SuggestMappingExample,
    SiAttribute,
    SuggestMappingRequest,
    SuggestMappingResponse,
)
from models.progress import (
    RunStatus,
    ItemStatus,
    ItemProcessingOutcome,
    ItemProgress,
    ProcessingState,
)

__all__ = [
    # Base
    "BaseSchema",
    "FrozenSchema",

    # Mapping
    "AttributeType",
    "AttributeDescriptor",
    "AttributeMatch",
    "OwnedRecordRef",
    "OwnedRecordPair",
    "ValuePair",
    "Transformation",
    "MappingSuggestion",
    "MappingsSuggestion",
    "MappingSuggestionRequest",
    "MappingsSuggestionResponse",
    "CancelRunResponse",

    # Suggestion service
    "AttributeExample",
    "SuggestMappingExample",
    "SiAttribute",
    "SuggestMappingRequest",
    "SuggestMappingResponse",

    # Progress
    "RunStatus",
    "ItemStatus",
    "ItemProcessingOutcome",
    "ItemProgress",
    "ProcessingState",
]
