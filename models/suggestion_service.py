"""
Wire schemas of the mapping suggestion service.

Shared by the HTTP transport (sent as JSON) and the Claude transport
(embedded in the prompt).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AttributeExample(BaseModel):
    """Values of one attribute in one example."""
    name: str
    values: list[str] = Field(default_factory=list)


class SuggestMappingExample(BaseModel):
    """One sampled record pair: account side and subject side."""
    application: AttributeExample
    midpoint: AttributeExample


class SiAttribute(BaseModel):
    """Attribute identity sent to the service."""
    name: str
    description: Optional[str] = None


class SuggestMappingRequest(BaseModel):
    """Request for a transformation script."""
    application_attribute: SiAttribute
    midpoint_attribute: SiAttribute
    inbound: bool = True
    examples: list[SuggestMappingExample] = Field(default_factory=list)


class SuggestMappingResponse(BaseModel):
    """Service answer; a missing script or the sentinel means no transformation."""
    model_config = ConfigDict(extra="ignore")

    transformation_script: Optional[str] = None
