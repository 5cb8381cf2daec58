"""
Pass-through sufficiency heuristic.

Decides from sampled value pairs whether copying the source value as is
reproduces the target values, so the suggestion service is only asked
when there is evidence that a transformation is needed.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional
import structlog

from models.mapping import AttributeType, Transformation, ValuePair
from exceptions import ValueConversionError
from utils.type_conversion import convert_value, normalize_value, unordered_equals

logger = structlog.get_logger(__name__)


class DecisionKind(str, Enum):
    """Outcome of the decision chain."""
    PASS_THROUGH = "pass_through"
    TRANSFORM = "transform"
    NEEDS_EXTERNAL_SUGGESTION = "needs_external_suggestion"


class PassThroughReason(str, Enum):
    """Why no transformation is used."""
    NO_DATA = "no_data"                          # No value pairs sampled
    NO_VALUES = "no_values"                      # One side null/empty everywhere
    VALUES_MATCH = "values_match"                # Converted source equals target
    TARGET_DATA_MISSING = "target_data_missing"  # Target not populated yet
    SERVICE_IDENTITY = "service_identity"        # Service answered with the sentinel


@dataclass(frozen=True)
class MappingDecision:
    """Tagged result: PassThrough(reason) | Transform(script) | NeedsExternalSuggestion."""
    kind: DecisionKind
    reason: Optional[PassThroughReason] = None
    script: Optional[str] = None

    @classmethod
    def pass_through(cls, reason: PassThroughReason) -> "MappingDecision":
        return cls(kind=DecisionKind.PASS_THROUGH, reason=reason)

    @classmethod
    def transform(cls, script: str) -> "MappingDecision":
        return cls(kind=DecisionKind.TRANSFORM, script=script)

    @classmethod
    def needs_external_suggestion(cls) -> "MappingDecision":
        return cls(kind=DecisionKind.NEEDS_EXTERNAL_SUGGESTION)

    @property
    def transformation(self) -> Optional[Transformation]:
        """Transformation to attach; None for pass-through."""
        if self.kind == DecisionKind.TRANSFORM:
            return Transformation(code=self.script)
        return None


def decide(value_pairs: list[ValuePair], target_type: AttributeType) -> MappingDecision:
    """
    Run the heuristic in fixed order; the first matching rule wins.

    1. No pairs                                    → pass-through
    2. Source or target all null/empty in each pair → pass-through
    3. Structural equivalence in every pair         → pass-through
    4. Target empty in every pair                   → pass-through
    5. Otherwise                                    → ask the service
    """
    if not value_pairs:
        logger.debug("pass_through_decided", reason=PassThroughReason.NO_DATA.value)
        return MappingDecision.pass_through(PassThroughReason.NO_DATA)

    if all(_all_null(p.source_values) or _all_null(p.target_values) for p in value_pairs):
        logger.debug("pass_through_decided", reason=PassThroughReason.NO_VALUES.value)
        return MappingDecision.pass_through(PassThroughReason.NO_VALUES)

    if does_pass_through_suffice(value_pairs, target_type):
        logger.debug("pass_through_decided", reason=PassThroughReason.VALUES_MATCH.value)
        return MappingDecision.pass_through(PassThroughReason.VALUES_MATCH)

    if is_target_data_missing(value_pairs):
        logger.debug("pass_through_decided", reason=PassThroughReason.TARGET_DATA_MISSING.value)
        return MappingDecision.pass_through(PassThroughReason.TARGET_DATA_MISSING)

    logger.debug("external_suggestion_needed", pairs=len(value_pairs))
    return MappingDecision.needs_external_suggestion()


def is_pass_through_sufficient(value_pairs: list[ValuePair], target_type: AttributeType) -> bool:
    """True when the identity mapping is good enough for these samples."""
    return decide(value_pairs, target_type).kind == DecisionKind.PASS_THROUGH


def does_pass_through_suffice(value_pairs: list[ValuePair], target_type: AttributeType) -> bool:
    """
    Structural equivalence: every pair has equal sizes and the converted
    source values equal the target values as an unordered multiset.
    """
    for pair in value_pairs:
        if len(pair.source_values) != len(pair.target_values):
            return False

        expected_target_values = []
        for source_value in pair.source_values:
            try:
                converted = convert_value(source_value, target_type)
            except ValueConversionError as e:
                # Only a sample; a failed conversion is enough to assume a transformation
                logger.debug(
                    "value_conversion_failed",
                    target_type=target_type.value,
                    reason=e.details.get("reason"),
                    value=repr(source_value)[:100]
                )
                return False
            if converted is not None:
                expected_target_values.append(converted)

        actual_target_values = [normalize_value(v, target_type) for v in pair.target_values]
        if not unordered_equals(actual_target_values, expected_target_values):
            return False
    return True


def is_target_data_missing(value_pairs: list[ValuePair]) -> bool:
    """True when no pair has any target value."""
    return all(not pair.target_values for pair in value_pairs)


def _all_null(values: tuple) -> bool:
    return all(v is None for v in values)
