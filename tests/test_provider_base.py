"""
Tests for BaseProvider.

Covers:
- Outcome mapping (SUCCESS, NOT_FOUND, ERROR, MOCK)
- Retry with exponential backoff
- Per-attempt timeout
- Safe normalization
"""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, call, patch

import aiohttp
import pytest

from riskbrain.core.exceptions import (
    MissingCredentialsError,
    SubjectNotFoundError,
    TransientProviderError,
)
from riskbrain.core.models import CommonData, ProviderStatus
from riskbrain.services.providers.base import BaseProvider, RetryPolicy

HANG = object()


class ScriptedProvider(BaseProvider):
    """
    Provider replaying a script of per-attempt results.

    Each attempt consumes one step; the last step repeats.
    Exceptions are raised, HANG sleeps past any timeout.
    """

    name = "scripted"

    def __init__(self, steps: list[Any], mock: Any = None, **kwargs: Any):
        super().__init__(**kwargs)
        self._steps = list(steps)
        self._mock = mock
        self.attempts = 0

    async def _fetch(self, subject: str, chain: str | None) -> Any:
        return await self._call_with_retry(self._attempt)

    async def _attempt(self) -> Any:
        self.attempts += 1
        step = self._steps.pop(0) if len(self._steps) > 1 else self._steps[0]
        if isinstance(step, BaseException):
            raise step
        if step is HANG:
            await asyncio.sleep(10)
        return step

    def _extract_common_data(self, raw_data: Any) -> CommonData:
        return CommonData(liquidity=raw_data["liquidity"])

    def _mock_data(self, subject: str, chain: str | None) -> Any:
        return self._mock


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_delay_doubles(self) -> None:
        policy = RetryPolicy(backoff_base=1.0)

        assert [policy.delay(n) for n in (1, 2, 3)] == [2.0, 4.0, 8.0]

    def test_defaults(self) -> None:
        policy = RetryPolicy()

        assert policy.attempts == 3
        assert policy.timeout == 10.0


class TestFetch:
    """Tests for BaseProvider.fetch()."""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, evm_address, fast_retry_policy) -> None:
        provider = ScriptedProvider([{"liquidity": 1}], retry_policy=fast_retry_policy)

        outcome = await provider.fetch(evm_address)

        assert outcome.status == ProviderStatus.SUCCESS
        assert outcome.provider_name == "scripted"
        assert outcome.raw_data == {"liquidity": 1}
        assert outcome.error_message is None
        assert provider.attempts == 1

    @pytest.mark.asyncio
    async def test_transient_errors_retried(self, evm_address, fast_retry_policy) -> None:
        """Two transient failures then success = SUCCESS on attempt 3."""
        provider = ScriptedProvider(
            [
                TransientProviderError(technical_message="HTTP 503"),
                aiohttp.ClientConnectionError("reset"),
                {"liquidity": 1},
            ],
            retry_policy=fast_retry_policy,
        )

        outcome = await provider.fetch(evm_address)

        assert outcome.status == ProviderStatus.SUCCESS
        assert provider.attempts == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_become_error(
        self, evm_address, fast_retry_policy
    ) -> None:
        provider = ScriptedProvider(
            [TransientProviderError(technical_message="HTTP 503")],
            retry_policy=fast_retry_policy,
        )

        outcome = await provider.fetch(evm_address)

        assert outcome.status == ProviderStatus.ERROR
        assert outcome.raw_data is None
        assert "all 3 attempts failed" in outcome.error_message
        assert "HTTP 503" in outcome.error_message
        assert provider.attempts == 3

    @pytest.mark.asyncio
    async def test_attempt_timeout(self, evm_address) -> None:
        """A hanging attempt is cut off and retried."""
        provider = ScriptedProvider(
            [HANG],
            retry_policy=RetryPolicy(attempts=2, timeout=0.05, backoff_base=0.0),
        )

        outcome = await asyncio.wait_for(provider.fetch(evm_address), timeout=2.0)

        assert outcome.status == ProviderStatus.ERROR
        assert "TimeoutError" in outcome.error_message
        assert provider.attempts == 2

    @pytest.mark.asyncio
    async def test_backoff_delays(self, evm_address) -> None:
        """Waits backoff_base * 2**attempt between attempts."""
        provider = ScriptedProvider(
            [TransientProviderError(technical_message="HTTP 500")],
            retry_policy=RetryPolicy(attempts=3, timeout=1.0, backoff_base=1.0),
        )

        with patch(
            "riskbrain.services.providers.base.asyncio.sleep", new=AsyncMock()
        ) as sleep:
            await provider.fetch(evm_address)

        assert sleep.await_args_list == [call(2.0), call(4.0)]

    @pytest.mark.asyncio
    async def test_not_found_not_retried(self, evm_address, fast_retry_policy) -> None:
        provider = ScriptedProvider(
            [SubjectNotFoundError(technical_message="No trading pairs found")],
            retry_policy=fast_retry_policy,
        )

        outcome = await provider.fetch(evm_address)

        assert outcome.status == ProviderStatus.NOT_FOUND
        assert outcome.error_message == "No trading pairs found"
        assert provider.attempts == 1

    @pytest.mark.asyncio
    async def test_empty_payload_is_not_found(
        self, evm_address, fast_retry_policy
    ) -> None:
        provider = ScriptedProvider([None], retry_policy=fast_retry_policy)

        outcome = await provider.fetch(evm_address)

        assert outcome.status == ProviderStatus.NOT_FOUND

    @pytest.mark.asyncio
    async def test_unexpected_error_not_retried(
        self, evm_address, fast_retry_policy
    ) -> None:
        """Programming errors surface as ERROR without retries."""
        provider = ScriptedProvider(
            [ValueError("bad payload")], retry_policy=fast_retry_policy
        )

        outcome = await provider.fetch(evm_address)

        assert outcome.status == ProviderStatus.ERROR
        assert outcome.error_message == "ValueError: bad payload"
        assert provider.attempts == 1


class TestMockFallback:
    """Tests for synthetic data on missing credentials."""

    @pytest.mark.asyncio
    async def test_missing_credentials_returns_mock(self, evm_address) -> None:
        provider = ScriptedProvider(
            [MissingCredentialsError(technical_message="no key")],
            mock={"synthetic": True},
        )

        outcome = await provider.fetch(evm_address)

        assert outcome.status == ProviderStatus.MOCK
        assert outcome.raw_data == {"synthetic": True}
        assert outcome.error_message is None

    @pytest.mark.asyncio
    async def test_mock_fallback_disabled(self, evm_address) -> None:
        provider = ScriptedProvider(
            [MissingCredentialsError(technical_message="no key")],
            mock={"synthetic": True},
            mock_fallback=False,
        )

        outcome = await provider.fetch(evm_address)

        assert outcome.status == ProviderStatus.ERROR
        assert outcome.error_message == "no key"

    @pytest.mark.asyncio
    async def test_no_mock_support_is_error(self, evm_address) -> None:
        provider = ScriptedProvider(
            [MissingCredentialsError(technical_message="no key")]
        )

        outcome = await provider.fetch(evm_address)

        assert outcome.status == ProviderStatus.ERROR


class TestExtractCommonData:
    """Tests for BaseProvider.extract_common_data()."""

    def test_maps_payload(self) -> None:
        provider = ScriptedProvider([None])

        assert provider.extract_common_data({"liquidity": 42}).liquidity == 42

    def test_malformed_payload_yields_empty(self) -> None:
        """Normalization failures never escape."""
        provider = ScriptedProvider([None])

        assert provider.extract_common_data({"unexpected": 1}).is_empty()
        assert provider.extract_common_data(None).is_empty()
