"""
Pytest configuration and fixtures.

Provides reusable test fixtures for:
- Sample addresses
- Sample collected data
- Fast retry policy
"""

import pytest

from riskbrain.core.models import (
    CollectedData,
    CommonData,
    ProviderOutcome,
    ProviderStatus,
)
from riskbrain.services.providers.base import RetryPolicy

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def evm_address() -> str:
    """Sample EVM token address (USDC)."""
    return "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


@pytest.fixture
def fast_retry_policy() -> RetryPolicy:
    """Three attempts, short timeout, no backoff wait."""
    return RetryPolicy(attempts=3, timeout=1.0, backoff_base=0.0)


@pytest.fixture
def empty_data() -> CollectedData:
    """Bundle where no provider contributed anything."""
    return CollectedData()


@pytest.fixture
def full_data() -> CollectedData:
    """Bundle with two successful providers and no errors."""
    return CollectedData(
        outcomes={
            "dexscreener": ProviderOutcome(
                provider_name="dexscreener",
                status=ProviderStatus.SUCCESS,
                raw_data=[{"liquidity": {"usd": 5_000}}],
            ),
            "amlbot": ProviderOutcome(
                provider_name="amlbot",
                status=ProviderStatus.SUCCESS,
                raw_data={"riskscore": 0.3, "signals": {}},
            ),
        },
        common_data={
            "dexscreener": CommonData(liquidity=5_000, volume_24h=500),
            "amlbot": CommonData(aml_risk_score=0.3),
        },
    )


@pytest.fixture
def degraded_data() -> CollectedData:
    """Bundle with four outcomes (one NOT_FOUND) and two crashed providers."""
    outcomes = {
        f"p{i}": ProviderOutcome(
            provider_name=f"p{i}",
            status=ProviderStatus.SUCCESS,
            raw_data={"i": i},
        )
        for i in range(3)
    }
    outcomes["p3"] = ProviderOutcome(
        provider_name="p3",
        status=ProviderStatus.NOT_FOUND,
        error_message="No trading pairs found",
    )
    return CollectedData(
        outcomes=outcomes,
        errors=["x: connection reset", "y: boom"],
    )
