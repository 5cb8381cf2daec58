"""
Mapping quality assessment.

Scores a suggested mapping against the sampled value pairs. The scorer
is pluggable; the orchestrator only relies on assess_mapping_quality().
"""

from typing import Optional
import structlog

from models.mapping import AttributeType, Transformation, ValuePair
from services.pass_through_service import does_pass_through_suffice

logger = structlog.get_logger(__name__)


class MappingQualityAssessor:
    """
    Default scorer.

    Pass-through mappings: share of pairs with target data that the
    identity mapping reproduces. Scripted mappings are not evaluated
    here (no script runtime), so their quality is unknown (None).
    """

    def assess_mapping_quality(
        self,
        value_pairs: list[ValuePair],
        transformation: Optional[Transformation],
        target_type: AttributeType
    ) -> Optional[float]:
        """
        Estimate mapping quality in [0, 1].

        Returns:
            Quality score, or None when there is nothing to judge from
        """
        if transformation is not None:
            return None

        evaluated = [pair for pair in value_pairs if pair.target_values]
        if not evaluated:
            return None

        reproduced = sum(
            1 for pair in evaluated
            if does_pass_through_suffice([pair], target_type)
        )
        quality = round(reproduced / len(evaluated), 4)
        logger.debug(
            "mapping_quality_assessed",
            evaluated=len(evaluated),
            reproduced=reproduced,
            quality=quality
        )
        return quality


# Singleton instance for convenience
_quality_assessor: Optional[MappingQualityAssessor] = None


def get_quality_assessor() -> MappingQualityAssessor:
    """Get or create MappingQualityAssessor instance."""
    global _quality_assessor
    if _quality_assessor is None:
        _quality_assessor = MappingQualityAssessor()
    return _quality_assessor
