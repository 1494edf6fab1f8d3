"""
Tests for AMLBotProvider.

Tests cover:
- Successful screening
- Pending checks
- API-level errors
- Synthetic fallback without credentials
"""

import hashlib

import pytest
from aioresponses import aioresponses

from riskbrain.core.models import ProviderStatus
from riskbrain.services.providers.amlbot import AMLBOT_API_URL, AMLBotProvider
from riskbrain.services.providers.base import RetryPolicy

ADDRESS = "0x8589427373d6d84e98730d7795d8f6f8731fda16"


@pytest.fixture
def amlbot_provider(fast_retry_policy: RetryPolicy) -> AMLBotProvider:
    """AMLBotProvider with test credentials."""
    return AMLBotProvider(
        tm_id="test-tm", access_key="test-key", retry_policy=fast_retry_policy
    )


@pytest.fixture
def mock_check_response() -> dict:
    """Mock ajaxcheck response for a risky address."""
    return {
        "result": True,
        "data": {
            "riskscore": 0.87,
            "signals": {"scam": 0.4, "mixer": 0.3, "exchange": 0.1},
            "addressDetailsData": {"n_txs": 320},
        },
    }


class TestAMLBotSuccess:
    """Tests for successful API responses."""

    @pytest.mark.asyncio
    async def test_fetch_success(
        self,
        amlbot_provider: AMLBotProvider,
        mock_check_response: dict,
    ) -> None:
        with aioresponses() as m:
            m.post(AMLBOT_API_URL, payload=mock_check_response)

            outcome = await amlbot_provider.fetch(ADDRESS, chain="ethereum")

        assert outcome.status == ProviderStatus.SUCCESS
        assert outcome.raw_data["riskscore"] == 0.87
        assert outcome.raw_data["signals"]["scam"] == 0.4

    @pytest.mark.asyncio
    async def test_request_is_signed(
        self,
        amlbot_provider: AMLBotProvider,
        mock_check_response: dict,
    ) -> None:
        """Form carries md5(address:access_key:tm_id)."""
        with aioresponses() as m:
            m.post(AMLBOT_API_URL, payload=mock_check_response)

            await amlbot_provider.fetch(ADDRESS)
            (calls,) = m.requests.values()

        form = calls[0].kwargs["data"]
        expected = hashlib.md5(f"{ADDRESS}:test-key:test-tm".encode()).hexdigest()
        assert form["token"] == expected
        assert form["tmId"] == "test-tm"
        assert form["chain"] == "ethereum"

    def test_extract_risk_score(
        self,
        amlbot_provider: AMLBotProvider,
        mock_check_response: dict,
    ) -> None:
        common = amlbot_provider.extract_common_data(mock_check_response["data"])

        assert common.aml_risk_score == 0.87

    def test_out_of_range_score_ignored(self, amlbot_provider: AMLBotProvider) -> None:
        assert amlbot_provider.extract_common_data({"riskscore": 87}).is_empty()


class TestAMLBotPending:
    """Tests for checks still in progress."""

    @pytest.mark.asyncio
    async def test_pending_check(self, amlbot_provider: AMLBotProvider) -> None:
        with aioresponses() as m:
            m.post(
                AMLBOT_API_URL,
                payload={"result": False, "description": "Check is Pending"},
            )

            outcome = await amlbot_provider.fetch(ADDRESS)

        assert outcome.status == ProviderStatus.SUCCESS
        assert outcome.raw_data["pending"] is True
        assert amlbot_provider.extract_common_data(outcome.raw_data).is_empty()


class TestAMLBotErrors:
    """Tests for error handling."""

    @pytest.mark.asyncio
    async def test_api_error_retried(self, amlbot_provider: AMLBotProvider) -> None:
        with aioresponses() as m:
            m.post(
                AMLBOT_API_URL,
                payload={"result": False, "description": "Invalid token"},
                repeat=True,
            )

            outcome = await amlbot_provider.fetch(ADDRESS)

        assert outcome.status == ProviderStatus.ERROR
        assert "Invalid token" in outcome.error_message

    @pytest.mark.asyncio
    async def test_unexpected_structure(self, amlbot_provider: AMLBotProvider) -> None:
        with aioresponses() as m:
            m.post(AMLBOT_API_URL, payload=["not", "a", "dict"], repeat=True)

            outcome = await amlbot_provider.fetch(ADDRESS)

        assert outcome.status == ProviderStatus.ERROR


class TestAMLBotMockFallback:
    """Tests for synthetic data without credentials."""

    @pytest.mark.asyncio
    async def test_missing_credentials_returns_mock(self) -> None:
        provider = AMLBotProvider()

        outcome = await provider.fetch(ADDRESS)

        assert outcome.status == ProviderStatus.MOCK
        assert outcome.raw_data["synthetic"] is True
        assert 0 <= outcome.raw_data["riskscore"] <= 1

    @pytest.mark.asyncio
    async def test_mock_is_deterministic(self) -> None:
        provider = AMLBotProvider()

        first = await provider.fetch(ADDRESS)
        second = await provider.fetch(ADDRESS)
        other = await provider.fetch("0x0000000000000000000000000000000000000001")

        assert first.raw_data == second.raw_data
        assert first.raw_data != other.raw_data

    @pytest.mark.asyncio
    async def test_mock_disabled(self) -> None:
        provider = AMLBotProvider(mock_fallback=False)

        outcome = await provider.fetch(ADDRESS)

        assert outcome.status == ProviderStatus.ERROR
        assert outcome.error_message == "AMLBot credentials not configured"
