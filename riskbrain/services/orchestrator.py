"""
Risk analyzer orchestrator.

Coordinates the assessment workflow without containing business logic.

Workflow:
1. DataCollector → gather provider outcomes
2. ProcessorManager → merge processor opinions
3. Return MergedAssessment
"""

import logging

from riskbrain.core.models import MergedAssessment
from riskbrain.services.processors.manager import ProcessorManager
from riskbrain.services.providers.collector import DataCollector

logger = logging.getLogger(__name__)


class RiskAnalyzer:
    """
    Orchestrates the risk assessment workflow.

    Degraded data shows up as lower confidence in the result,
    never as an exception.

    Usage:
        analyzer = RiskAnalyzer(collector, manager)
        result = await analyzer.analyze("0xabc...", "evm", chain="ethereum")
    """

    def __init__(self, collector: DataCollector, manager: ProcessorManager):
        """
        Initialize orchestrator.

        Args:
            collector: Runs the registered providers
            manager: Runs and merges the registered processors
        """
        self._collector = collector
        self._manager = manager

    @property
    def collector(self) -> DataCollector:
        return self._collector

    @property
    def manager(self) -> ProcessorManager:
        return self._manager

    async def analyze(
        self,
        subject: str,
        subject_type: str,
        chain: str | None = None,
    ) -> MergedAssessment:
        """
        Perform full risk assessment.

        Args:
            subject: Address being assessed
            subject_type: Address family (e.g. "evm", "solana")
            chain: Optional chain name for providers

        Returns:
            MergedAssessment with final score, confidence and explanations
        """
        logger.info(f"Starting assessment for {subject[:8]}... ({subject_type})")

        collected = await self._collector.collect(subject, chain)
        if not collected.outcomes:
            logger.warning(f"No provider returned data for {subject[:8]}")

        result = await self._manager.process(subject, subject_type, collected)

        logger.info(
            f"Assessment complete for {subject[:8]}: "
            f"score={result.final_score}, confidence={result.confidence:.2f}, "
            f"processors={result.processor_count}"
        )
        return result
