"""
Service factory for dependency injection.

Creates and configures providers, processors and the analyzer
from application settings. Credentials and policies are passed
into constructors; nothing reads global configuration later.

This is the single point of service creation.
"""

import logging

from riskbrain.config.settings import Settings
from riskbrain.core.protocols import Provider, RiskProcessor
from riskbrain.services.orchestrator import RiskAnalyzer
from riskbrain.services.processors.comprehensive import ComprehensiveRiskProcessor
from riskbrain.services.processors.manager import ProcessorManager
from riskbrain.services.processors.openrouter import LLMRiskProcessor
from riskbrain.services.providers.amlbot import AMLBotProvider
from riskbrain.services.providers.base import RetryPolicy
from riskbrain.services.providers.bubblemap import BubblemapProvider
from riskbrain.services.providers.collector import DataCollector
from riskbrain.services.providers.dexscreener import DexScreenerProvider

logger = logging.getLogger(__name__)


class ServiceFactory:
    """
    Factory for creating engine services.

    Reads configuration once and builds every enabled collaborator.
    Unknown names in enabled_providers / enabled_processors are
    logged and skipped.

    Usage:
        factory = ServiceFactory(settings)
        analyzer = factory.create_analyzer()
    """

    def __init__(self, settings: Settings):
        """
        Initialize factory with application settings.

        Args:
            settings: Application configuration
        """
        self._settings = settings

    def retry_policy_for(self, provider_name: str) -> RetryPolicy:
        """Global retry settings with per-provider overrides applied."""
        s = self._settings
        override = s.provider_overrides.get(provider_name)

        policy = RetryPolicy(
            attempts=s.provider_retries,
            timeout=s.provider_timeout_seconds,
            backoff_base=s.provider_backoff_base_seconds,
        )
        if override is None:
            return policy

        return RetryPolicy(
            attempts=override.retries or policy.attempts,
            timeout=override.timeout_seconds or policy.timeout,
            backoff_base=(
                override.backoff_base_seconds
                if override.backoff_base_seconds is not None
                else policy.backoff_base
            ),
        )

    def create_provider(self, name: str) -> Provider | None:
        """
        Create provider by name.

        Returns:
            Provider, or None if the name is unknown
        """
        s = self._settings
        policy = self.retry_policy_for(name)

        if name == "amlbot":
            return AMLBotProvider(
                tm_id=s.amlbot_tm_id,
                access_key=s.amlbot_access_key,
                retry_policy=policy,
                mock_fallback=s.mock_fallback_enabled,
            )
        if name == "dexscreener":
            return DexScreenerProvider(retry_policy=policy)
        if name == "bubblemap":
            return BubblemapProvider(api_key=s.bubblemap_api_key, retry_policy=policy)

        logger.warning(f"Unknown provider '{name}' skipped")
        return None

    def create_processor(self, name: str) -> RiskProcessor | None:
        """
        Create processor by name.

        Returns:
            RiskProcessor, or None if the name is unknown
        """
        s = self._settings
        confidence = {
            "confidence_floor": s.confidence_floor,
            "count_not_found": s.count_not_found_as_contributing,
        }

        if name == "comprehensive":
            return ComprehensiveRiskProcessor(**confidence)
        if name == "openrouter":
            return LLMRiskProcessor(
                api_key=s.openrouter_api_key,
                model=s.llm_model,
                timeout=s.llm_timeout_seconds,
                **confidence,
            )

        logger.warning(f"Unknown processor '{name}' skipped")
        return None

    def create_collector(self) -> DataCollector:
        collector = DataCollector()
        for name in self._settings.enabled_providers:
            provider = self.create_provider(name)
            if provider is not None:
                collector.add_provider(provider)
        return collector

    def create_processor_manager(self) -> ProcessorManager:
        s = self._settings
        manager = ProcessorManager(
            confidence_boost=s.multi_processor_confidence_boost,
            neutral_score=s.neutral_score,
            fallback_confidence=s.confidence_floor,
        )
        for name in s.enabled_processors:
            processor = self.create_processor(name)
            if processor is not None:
                manager.add_processor(processor)
        return manager

    def create_analyzer(self) -> RiskAnalyzer:
        """
        Create the main risk analyzer with all dependencies.

        Returns:
            RiskAnalyzer ready for use
        """
        logger.info("Creating RiskAnalyzer with all dependencies")
        return RiskAnalyzer(
            collector=self.create_collector(),
            manager=self.create_processor_manager(),
        )
