"""
Base class for risk processors.

A processor is one independent scoring strategy. Subclasses implement
process() and return a raw score with explanations; assess_risk() wraps
it with the shared behaviour:
1. Failures and "no opinion" results become None (never raised)
2. Score is clamped into [0, 100]
3. Confidence is derived from how much provider data was available
"""

import logging
import math
from abc import ABC, abstractmethod

from riskbrain.core.constants import CONFIDENCE_FLOOR, MAX_SCORE, MIN_SCORE
from riskbrain.core.models import CollectedData, ProcessorResult, RiskAssessment

logger = logging.getLogger(__name__)


def clamp_score(score: float) -> float:
    """Clamp a score into [0, 100]."""
    return max(MIN_SCORE, min(MAX_SCORE, score))


def calculate_confidence(
    collected_data: CollectedData,
    floor: float = CONFIDENCE_FLOOR,
    count_not_found: bool = True,
) -> float:
    """
    Confidence from data availability.

    confidence = max(floor, 1 - errors / providers), or floor when no
    provider contributed. A provider contributes when it returned any
    outcome; NOT_FOUND outcomes count only if count_not_found is set.

    Args:
        collected_data: Bundle produced by the DataCollector
        floor: Lowest confidence returned
        count_not_found: Whether NOT_FOUND outcomes count as contributions

    Returns:
        Confidence in [floor, 1]
    """
    provider_count = collected_data.provider_count(count_not_found=count_not_found)
    error_count = len(collected_data.errors)

    if provider_count > 0:
        return max(floor, 1 - error_count / provider_count)
    return floor


class BaseRiskProcessor(ABC):
    """
    Shared implementation of the RiskProcessor protocol.

    Usage:
        class MyProcessor(BaseRiskProcessor):
            name = "mine"

            async def process(self, subject, subject_type, collected_data):
                return ProcessorResult(score=42, explanations=[...])
    """

    def __init__(
        self,
        confidence_floor: float = CONFIDENCE_FLOOR,
        count_not_found: bool = True,
    ):
        """
        Initialize processor.

        Args:
            confidence_floor: Lowest confidence this processor reports
            count_not_found: Count NOT_FOUND outcomes as contributing providers
        """
        self._confidence_floor = confidence_floor
        self._count_not_found = count_not_found

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this processor."""

    @abstractmethod
    async def process(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> ProcessorResult | None:
        """
        Score the collected data.

        Returns:
            ProcessorResult, or None when there is nothing to score

        Raises:
            Any exception - assess_risk() treats it as "no opinion"
        """

    async def assess_risk(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> RiskAssessment | None:
        """
        Run process() and attach a clamped score and confidence.

        Returns:
            RiskAssessment, or None if the processor failed or had no opinion
        """
        try:
            result = await self.process(subject, subject_type, collected_data)
            if result is not None:
                # Plain {score, explanations} mappings are accepted
                result = ProcessorResult.model_validate(result)
        except Exception as e:
            logger.warning(f"Processor '{self.name}' failed: {type(e).__name__}: {e}")
            return None

        if result is None or math.isnan(result.score):
            logger.info(f"Processor '{self.name}' has no opinion on {subject[:8]}")
            return None

        confidence = self.calculate_confidence(collected_data)

        return RiskAssessment(
            score=clamp_score(result.score),
            explanations=result.explanations,
            confidence=confidence,
            processor_name=self.name,
        )

    def calculate_confidence(self, collected_data: CollectedData) -> float:
        return calculate_confidence(
            collected_data,
            floor=self._confidence_floor,
            count_not_found=self._count_not_found,
        )
