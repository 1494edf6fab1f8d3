"""
Data collector service.

Runs every registered provider concurrently against one subject and
merges their outcomes into a single CollectedData bundle.

This service:
1. Dispatches all providers at once and waits for all of them
2. Isolates providers - one crash never affects the others
3. Extracts normalized CommonData from successful outcomes

It does NOT:
- Score anything (that's the ProcessorManager's job)
- Retry (each provider owns its retry policy)
"""

import asyncio
import inspect
import logging

from riskbrain.core.exceptions import ConfigurationError
from riskbrain.core.models import CollectedData, CommonData, ProviderOutcome
from riskbrain.core.protocols import Provider

logger = logging.getLogger(__name__)


class DataCollector:
    """
    Collects data about a subject from many providers in parallel.

    The registered provider list is only read during collect(), so
    concurrent collections for different subjects are safe.

    Usage:
        collector = DataCollector()
        collector.add_provider(DexScreenerProvider())
        data = await collector.collect("0xabc...", chain="ethereum")
    """

    def __init__(self, providers: list[Provider] | None = None):
        """
        Initialize collector.

        Args:
            providers: Providers to register up front

        Raises:
            ConfigurationError: If a provider violates the contract
        """
        self._providers: list[Provider] = []
        for provider in providers or []:
            self.add_provider(provider)

    def add_provider(self, provider: Provider) -> None:
        """
        Register a provider.

        Raises:
            ConfigurationError: If the provider is malformed or its
                name is already registered
        """
        name = getattr(provider, "name", None)
        if not isinstance(name, str) or not name:
            raise ConfigurationError(
                technical_message=f"Provider {provider!r} has no valid name"
            )
        if not inspect.iscoroutinefunction(getattr(provider, "fetch", None)):
            raise ConfigurationError(
                technical_message=f"Provider '{name}' has no async fetch()"
            )
        if not callable(getattr(provider, "extract_common_data", None)):
            raise ConfigurationError(
                technical_message=f"Provider '{name}' has no extract_common_data()"
            )
        if any(p.name == name for p in self._providers):
            raise ConfigurationError(
                technical_message=f"Provider '{name}' is already registered"
            )

        self._providers.append(provider)
        logger.info(f"Registered provider '{name}'")

    def remove_provider(self, name: str) -> None:
        """Unregister a provider by name. Unknown names are ignored."""
        self._providers = [p for p in self._providers if p.name != name]
        logger.info(f"Removed provider '{name}'")

    def list_providers(self) -> list[Provider]:
        """Snapshot of registered providers."""
        return list(self._providers)

    async def collect(self, subject: str, chain: str | None = None) -> CollectedData:
        """
        Fetch data from all providers and merge the results.

        Never raises. A bundle where every provider failed is a valid
        result (empty outcomes, non-empty errors).

        Args:
            subject: Address being assessed
            chain: Optional chain name passed to every provider

        Returns:
            CollectedData with outcomes, common data and errors
        """
        providers = list(self._providers)
        logger.info(f"Collecting data for {subject[:8]}... from {len(providers)} providers")

        results = await asyncio.gather(
            *(self._fetch_one(provider, subject, chain) for provider in providers),
            return_exceptions=True,
        )

        data = CollectedData()
        for provider, result in zip(providers, results):
            self._merge_result(data, provider, result)

        logger.info(
            f"Collected for {subject[:8]}: "
            f"{len(data.outcomes)} outcomes, {len(data.errors)} errors"
        )
        return data

    async def _fetch_one(
        self,
        provider: Provider,
        subject: str,
        chain: str | None,
    ) -> ProviderOutcome:
        """Call one provider; errors raised while starting the call are gathered too."""
        return await provider.fetch(subject, chain)

    def _merge_result(
        self,
        data: CollectedData,
        provider: Provider,
        result: ProviderOutcome | BaseException | None,
    ) -> None:
        """Record one provider's result in the bundle."""
        name = provider.name

        if isinstance(result, BaseException):
            logger.warning(f"Provider '{name}' raised: {type(result).__name__}: {result}")
            data.errors.append(f"{name}: {str(result) or type(result).__name__}")
            return

        if not isinstance(result, ProviderOutcome):
            logger.warning(f"Provider '{name}' returned no outcome")
            data.errors.append(f"{name}: Failed to fetch data")
            return

        data.outcomes[name] = result

        if not result.is_success:
            return

        try:
            common = provider.extract_common_data(result.raw_data)
            if common is None:
                return
            # Plain mappings are accepted as records
            common = CommonData.model_validate(common)
        except Exception as e:
            # Contract violation by a provider not built on BaseProvider
            logger.warning(f"Provider '{name}' failed to normalize data: {e}")
            return

        if not common.is_empty():
            data.common_data[name] = common
