"""
Processor manager.

Runs every registered risk processor concurrently over one
CollectedData bundle and reduces their independent opinions to a
single confidence-weighted MergedAssessment.

Merge rules:
- No valid opinion: neutral score, floor confidence (never raises)
- One opinion: passed through unchanged
- Several opinions: score weighted by each processor's confidence,
  confidence = mean confidence * boost, capped at 1
- Explanations are deduplicated by text, first occurrence wins
"""

import asyncio
import inspect
import logging
import math

from riskbrain.core.constants import (
    CONFIDENCE_FLOOR,
    MAX_CONFIDENCE,
    MULTI_PROCESSOR_CONFIDENCE_BOOST,
    NEUTRAL_SCORE,
)
from riskbrain.core.exceptions import ConfigurationError
from riskbrain.core.models import (
    CollectedData,
    Explanation,
    ExplanationType,
    MergedAssessment,
    RiskAssessment,
)
from riskbrain.core.protocols import RiskProcessor

logger = logging.getLogger(__name__)

NO_PROCESSORS_EXPLANATION = "No risk assessment processors available"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _unique_explanations(assessments: list[RiskAssessment]) -> list[Explanation]:
    seen: set[str] = set()
    unique: list[Explanation] = []
    for assessment in assessments:
        for explanation in assessment.explanations:
            if explanation.text not in seen:
                seen.add(explanation.text)
                unique.append(explanation)
    return unique


def merge_assessments(
    assessments: list[RiskAssessment],
    confidence_boost: float = MULTI_PROCESSOR_CONFIDENCE_BOOST,
    neutral_score: float = NEUTRAL_SCORE,
    fallback_confidence: float = CONFIDENCE_FLOOR,
) -> MergedAssessment:
    """
    Reduce processor opinions to one assessment.

    Score and confidence do not depend on the order of `assessments`
    (sums use math.fsum, which is exact).

    Args:
        assessments: Valid per-processor opinions
        confidence_boost: Multiplier on mean confidence for 2+ opinions
        neutral_score: Score used when nothing can be weighted
        fallback_confidence: Confidence when there is no opinion at all

    Returns:
        MergedAssessment
    """
    if not assessments:
        return MergedAssessment(
            final_score=neutral_score,
            explanations=[
                Explanation(
                    text=NO_PROCESSORS_EXPLANATION,
                    type=ExplanationType.NEUTRAL,
                )
            ],
            confidence=fallback_confidence,
            processor_assessments=[],
            processor_count=0,
        )

    if len(assessments) == 1:
        single = assessments[0]
        return MergedAssessment(
            final_score=single.score,
            explanations=list(single.explanations),
            confidence=single.confidence,
            processor_assessments=[single],
            processor_count=1,
        )

    total_weight = math.fsum(a.confidence for a in assessments)
    weighted_score = math.fsum(a.score * a.confidence for a in assessments)

    if total_weight > 0:
        final_score = _round_half_up(weighted_score / total_weight)
    else:
        final_score = neutral_score

    average_confidence = total_weight / len(assessments)

    return MergedAssessment(
        final_score=final_score,
        explanations=_unique_explanations(assessments),
        confidence=min(MAX_CONFIDENCE, average_confidence * confidence_boost),
        processor_assessments=list(assessments),
        processor_count=len(assessments),
    )


class ProcessorManager:
    """
    Runs all risk processors and merges their opinions.

    The registered processor list is only read during process(), so
    concurrent calls for different subjects are safe.

    Usage:
        manager = ProcessorManager()
        manager.add_processor(ComprehensiveRiskProcessor())
        merged = await manager.process("0xabc...", "evm", collected_data)
    """

    def __init__(
        self,
        processors: list[RiskProcessor] | None = None,
        confidence_boost: float = MULTI_PROCESSOR_CONFIDENCE_BOOST,
        neutral_score: float = NEUTRAL_SCORE,
        fallback_confidence: float = CONFIDENCE_FLOOR,
    ):
        """
        Initialize manager.

        Args:
            processors: Processors to register up front
            confidence_boost: Multiplier on mean confidence for 2+ opinions
            neutral_score: Score when no opinion can be formed
            fallback_confidence: Confidence when no processor contributed

        Raises:
            ConfigurationError: If a processor violates the contract
        """
        self._processors: list[RiskProcessor] = []
        self._confidence_boost = confidence_boost
        self._neutral_score = neutral_score
        self._fallback_confidence = fallback_confidence

        for processor in processors or []:
            self.add_processor(processor)

    def add_processor(self, processor: RiskProcessor) -> None:
        """
        Register a processor.

        Raises:
            ConfigurationError: If the processor is malformed or its
                name is already registered
        """
        name = getattr(processor, "name", None)
        if not isinstance(name, str) or not name:
            raise ConfigurationError(
                technical_message=f"Processor {processor!r} has no valid name"
            )
        if not inspect.iscoroutinefunction(getattr(processor, "assess_risk", None)):
            raise ConfigurationError(
                technical_message=f"Processor '{name}' has no async assess_risk()"
            )
        if any(p.name == name for p in self._processors):
            raise ConfigurationError(
                technical_message=f"Processor '{name}' is already registered"
            )

        self._processors.append(processor)
        logger.info(f"Registered processor '{name}'")

    def remove_processor(self, name: str) -> None:
        """Unregister a processor by name. Unknown names are ignored."""
        self._processors = [p for p in self._processors if p.name != name]
        logger.info(f"Removed processor '{name}'")

    def list_processors(self) -> list[RiskProcessor]:
        """Snapshot of registered processors."""
        return list(self._processors)

    async def process(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> MergedAssessment:
        """
        Run all processors concurrently and merge their opinions.

        Never raises: failing processors are dropped, and when none
        contributes the neutral fallback assessment is returned.

        Args:
            subject: Address being assessed
            subject_type: Address family (e.g. "evm", "solana")
            collected_data: Bundle produced by the DataCollector

        Returns:
            MergedAssessment
        """
        processors = list(self._processors)
        logger.info(f"Running {len(processors)} processors for {subject[:8]}...")

        results = await asyncio.gather(
            *(
                self._assess_one(p, subject, subject_type, collected_data)
                for p in processors
            ),
            return_exceptions=True,
        )

        valid_assessments: list[RiskAssessment] = []
        for processor, result in zip(processors, results):
            if isinstance(result, RiskAssessment):
                valid_assessments.append(result)
            elif isinstance(result, BaseException):
                logger.warning(
                    f"Processor '{processor.name}' raised: "
                    f"{type(result).__name__}: {result}"
                )
            else:
                logger.info(f"Processor '{processor.name}' returned no assessment")

        merged = merge_assessments(
            valid_assessments,
            confidence_boost=self._confidence_boost,
            neutral_score=self._neutral_score,
            fallback_confidence=self._fallback_confidence,
        )

        logger.info(
            f"Merged {merged.processor_count} assessments for {subject[:8]}: "
            f"score={merged.final_score}, confidence={merged.confidence:.2f}"
        )
        return merged

    async def _assess_one(
        self,
        processor: RiskProcessor,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> RiskAssessment | None:
        """Call one processor; errors raised while starting the call are gathered too."""
        return await processor.assess_risk(subject, subject_type, collected_data)
