"""
Suggestion service client.

Asks an external service for a transformation script that turns an
account attribute value into a subject property value. Two transports:

- HTTP microservice (when SUGGESTION_SERVICE_URL is set)
- Claude (when ANTHROPIC_API_KEY is set)

Calls are blocking. Failures propagate as SuggestionServiceError
(transport) or SuggestionResponseError (unexpected response shape).
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Optional

import anthropic
import requests
import structlog
from pydantic import ValidationError as PydanticValidationError

from config import settings
from models.mapping import AttributeDescriptor
from models.suggestion_service import (
    SiAttribute,
    SuggestMappingExample,
    SuggestMappingRequest,
    SuggestMappingResponse,
)
from exceptions import SuggestionServiceError, SuggestionResponseError

logger = structlog.get_logger(__name__)


def is_no_transformation(script: Optional[str]) -> bool:
    """True for a missing/blank script or the "no transformation" sentinel."""
    if script is None or not script.strip():
        return True
    return script.strip() == settings.no_transformation_sentinel


class SuggestionClient(ABC):
    """
    Base client: builds the request, delegates transport to invoke().
    """

    def suggest(
        self,
        source_attribute: AttributeDescriptor,
        target_attribute: AttributeDescriptor,
        inbound: bool,
        examples: list[SuggestMappingExample]
    ) -> Optional[str]:
        """
        Ask for a transformation script.

        Args:
            source_attribute: Account attribute identity
            target_attribute: Subject property identity
            inbound: Direction flag (account → subject)
            examples: Stringified value pairs

        Returns:
            Script text, the sentinel, or None

        Raises:
            SuggestionServiceError: Transport failure
            SuggestionResponseError: Response does not match the schema
        """
        request = SuggestMappingRequest(
            application_attribute=SiAttribute(
                name=source_attribute.name,
                description=source_attribute.description
            ),
            midpoint_attribute=SiAttribute(
                name=target_attribute.name,
                description=target_attribute.description
            ),
            inbound=inbound,
            examples=examples,
        )
        logger.info(
            "suggestion_requested",
            source_attribute=source_attribute.name,
            target_attribute=target_attribute.name,
            examples=len(examples)
        )
        response = self.invoke(request)
        logger.debug(
            "suggestion_received",
            source_attribute=source_attribute.name,
            has_script=response.transformation_script is not None
        )
        return response.transformation_script

    @abstractmethod
    def invoke(self, request: SuggestMappingRequest) -> SuggestMappingResponse:
        """Send the request over the transport and validate the answer."""


class HttpSuggestionClient(SuggestionClient):
    """Calls the suggestion microservice over HTTP."""

    ENDPOINT = "/api/v1/suggest-mapping"

    def __init__(self, base_url: str, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.url = base_url.rstrip("/") + self.ENDPOINT
        self.timeout = timeout or settings.suggestion_service_timeout_seconds
        self.session = session or requests.Session()

    def invoke(self, request: SuggestMappingRequest) -> SuggestMappingResponse:
        try:
            response = self.session.post(
                self.url,
                json=request.model_dump(mode="json"),
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("suggestion_service_request_failed", url=self.url, error=str(e))
            raise SuggestionServiceError(
                f"Suggestion service request failed: {e}",
                details={"url": self.url}
            ) from e

        try:
            payload = response.json()
        except ValueError as e:
            logger.error("suggestion_service_invalid_json", body_preview=response.text[:500])
            raise SuggestionResponseError("Suggestion service returned invalid JSON") from e

        return _validate_response(payload)


class ClaudeSuggestionClient(SuggestionClient):
    """
    Asks Claude for a transformation script.

    The request is sent as JSON; Claude must answer with
    {"transformation_script": ...} only.
    """

    SYSTEM_PROMPT = """You are an identity data mapping assistant. You receive one source (application) attribute, one target (midPoint) attribute and example values of both taken from the same identities.

Decide how to compute the target value from the source value.

IMPORTANT: Return ONLY valid JSON, no markdown, no explanation, no code blocks.

Return JSON in this exact structure:
{"transformation_script": "<script>"}

Rules:
- If the target value equals the source value (possibly after a plain type conversion), return {"transformation_script": "input"}
- Otherwise return a short Groovy expression. The source value is available as the variable `input`.
- Multi-valued attributes are given as value lists; the script computes one target value from one source value.
- Do not invent data that is not derivable from the source value."""

    def __init__(self, api_key: Optional[str] = None, client: Optional[anthropic.Anthropic] = None):
        self.client = client or anthropic.Anthropic(api_key=api_key or settings.anthropic_api_key)
        self.model = settings.suggestion_model
        self.max_tokens = settings.suggestion_max_tokens

    def invoke(self, request: SuggestMappingRequest) -> SuggestMappingResponse:
        prompt = (
            "Suggest a mapping for this request:\n"
            + json.dumps(request.model_dump(mode="json"), indent=2)
        )
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=self.SYSTEM_PROMPT,
                messages=[{
                    "role": "user",
                    "content": prompt
                }]
            )
        except anthropic.APIError as e:
            logger.error("claude_api_error", error=str(e))
            raise SuggestionServiceError(f"Claude API error: {e}") from e

        response_text = response.content[0].text
        logger.debug("claude_response_received", response_length=len(response_text))
        return self._parse_claude_response(response_text)

    def _parse_claude_response(self, response_text: str) -> SuggestMappingResponse:
        # Remove markdown code fences if present
        cleaned = response_text.strip()
        if cleaned.startswith("```"):
            cleaned = re.sub(r'^```(?:json)?\s*', '', cleaned)
            cleaned = re.sub(r'\s*```$', '', cleaned)

        try:
            payload = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.error("json_parse_failed", response_preview=response_text[:500], error=str(e))
            raise SuggestionResponseError(
                "Claude returned invalid JSON",
                details={"response_preview": response_text[:200]}
            ) from e

        return _validate_response(payload)


def _validate_response(payload) -> SuggestMappingResponse:
    if not isinstance(payload, dict):
        raise SuggestionResponseError(
            "Suggestion response must be a JSON object",
            details={"type": type(payload).__name__}
        )
    try:
        return SuggestMappingResponse.model_validate(payload)
    except PydanticValidationError as e:
        raise SuggestionResponseError(
            "Suggestion response does not match the schema",
            details={"errors": e.errors(include_url=False, include_context=False)}
        ) from e


# Singleton instance for convenience
_suggestion_client: Optional[SuggestionClient] = None


def get_suggestion_client() -> SuggestionClient:
    """
    Get or create the configured suggestion client.

    Raises:
        SuggestionServiceError: If neither transport is configured
    """
    global _suggestion_client
    if _suggestion_client is None:
        if settings.suggestion_service_url:
            _suggestion_client = HttpSuggestionClient(settings.suggestion_service_url)
        elif settings.claude_configured:
            _suggestion_client = ClaudeSuggestionClient()
        else:
            raise SuggestionServiceError(
                "No suggestion service configured. Set SUGGESTION_SERVICE_URL or ANTHROPIC_API_KEY."
            )
    return _suggestion_client
