"""
Protocol definitions (interfaces) for pluggable collaborators.

BaseProvider and BaseRiskProcessor implement these protocols with the
shared safe-call, retry and confidence behaviour, but any object with
the right shape can be registered.
"""

from typing import Any, Protocol, runtime_checkable

from riskbrain.core.models import (
    CollectedData,
    CommonData,
    ProviderOutcome,
    RiskAssessment,
)


@runtime_checkable
class Provider(Protocol):
    """
    Protocol for external data sources.

    Implementations fetch raw data about a subject from one source like:
    - AMLBot (address screening)
    - DexScreener (market data)
    - Bubblemaps (holder clusters)
    """

    @property
    def name(self) -> str:
        """Unique provider identifier."""
        ...

    async def fetch(self, subject: str, chain: str | None = None) -> ProviderOutcome:
        """
        Fetch raw data for a subject.

        Must not raise in steady state: failures are returned as
        ERROR / NOT_FOUND outcomes.
        """
        ...

    def extract_common_data(self, raw_data: Any) -> CommonData:
        """
        Derive normalized fields from raw_data.

        Pure function of raw_data. Returns an empty CommonData
        instead of raising on missing or malformed fields.
        """
        ...


@runtime_checkable
class RiskProcessor(Protocol):
    """
    Protocol for independent scoring strategies.

    assess_risk returns None when the processor has no opinion
    (failure or nothing to score). The ProcessorManager then leaves
    it out of the merge.
    """

    @property
    def name(self) -> str:
        """Unique processor identifier."""
        ...

    async def assess_risk(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> RiskAssessment | None:
        ...
