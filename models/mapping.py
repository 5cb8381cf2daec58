"""
Mapping schemas: attribute matches, sampled record pairs, value pairs
and the resulting mapping suggestions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.base import BaseSchema, FrozenSchema
from models.suggestion_service import AttributeExample, SuggestMappingExample


class AttributeType(str, Enum):
    """Declared type of a target attribute; selects the conversion rule."""
    STRING = "string"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    ANY = "any"


class AttributeDescriptor(FrozenSchema):
    """Attribute identity as presented to the suggestion service."""

    name: str = Field(
        ...,
        min_length=1,
        description="Descriptive attribute name",
        examples=["mail", "emailAddress"]
    )
    description: Optional[str] = Field(
        None,
        description="Free-text description of the attribute"
    )


class AttributeMatch(FrozenSchema):
    """
    One candidate mapping produced by schema matching.

    Source side lives on the account record, target side on the subject record.
    """

    source_attribute: AttributeDescriptor
    source_path: str = Field(
        ...,
        min_length=1,
        description="Path of the attribute in the account record",
        examples=["attributes/ri:mail"]
    )
    target_attribute: AttributeDescriptor
    target_path: str = Field(
        ...,
        min_length=1,
        description="Path of the property in the subject record",
        examples=["emailAddress", "extension/ext:costCenter"]
    )
    target_type: AttributeType = Field(
        AttributeType.STRING,
        description="Declared type of the target property"
    )


class OwnedRecordRef(BaseSchema):
    """Reference to an account record and the subject that owns it; either id may be missing."""

    account_id: Optional[str] = None
    owner_id: Optional[str] = None


@dataclass(frozen=True)
class OwnedRecordPair:
    """Preloaded account record and its owner, reused across all candidates."""
    account: dict
    owner: dict


@dataclass(frozen=True)
class ValuePair:
    """Real values of one candidate's source and target attribute for one record pair."""
    source_values: tuple
    target_values: tuple

    def to_example(self, source_name: str, target_name: str) -> SuggestMappingExample:
        """Build a suggestion-service example; values are stringified and nulls dropped."""
        return SuggestMappingExample(
            application=AttributeExample(name=source_name, values=_stringify(self.source_values)),
            midpoint=AttributeExample(name=target_name, values=_stringify(self.target_values)),
        )


def _stringify(values: tuple) -> list[str]:
    return [str(v) for v in values if v is not None]


class Transformation(BaseModel):
    """Opaque transformation script, kept verbatim."""
    model_config = ConfigDict(frozen=True)

    code: str = Field(
        ...,
        min_length=1,
        description="Transformation script text"
    )


class MappingSuggestion(BaseModel):
    """
    Suggested mapping for one attribute match.

    transformation is None when the value passes through unchanged.
    """

    match: AttributeMatch
    transformation: Optional[Transformation] = None
    expected_quality: Optional[float] = Field(
        None,
        ge=0,
        le=1,
        description="Estimated share of sampled values the mapping reproduces"
    )
    mapping_name: str
    source_ref: str
    target_path: str
    ai_provided: bool = True

    @property
    def is_pass_through(self) -> bool:
        return self.transformation is None


class MappingsSuggestion(BaseModel):
    """Suggestions for all successfully processed matches, in input order."""

    attribute_mappings: list[MappingSuggestion] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.attribute_mappings)


# ===================
# API SCHEMAS
# ===================

class MappingSuggestionRequest(BaseSchema):
    """Body of POST /api/mapping-suggestions."""

    resource_id: str = Field(..., min_length=1, description="Resource the accounts live on")
    object_type: str = Field("account", min_length=1, description="Object type of the accounts")
    matches: list[AttributeMatch] = Field(default_factory=list)
    owned_records: Optional[list[OwnedRecordRef]] = Field(
        None,
        description="Sampled references; sampled from the store when omitted"
    )
    run_id: Optional[str] = Field(
        None,
        min_length=1,
        max_length=100,
        description="Client-chosen run id, so the run can be watched and cancelled while in flight"
    )


class MappingsSuggestionResponse(BaseModel):
    """Response of POST /api/mapping-suggestions."""

    run_id: str
    suggestions: list[MappingSuggestion]
    total: int


class CancelRunResponse(BaseModel):
    run_id: str
    cancelled: bool


def describe_match(match: AttributeMatch) -> dict[str, Any]:
    """Log context for one match."""
    return {
        "source_path": match.source_path,
        "target_path": match.target_path,
        "target_type": match.target_type.value,
    }
