"""
Base class for external data providers.

Implements the provider contract once for every concrete source:
1. fetch() never raises - failures become typed outcomes
2. Each network attempt is bounded by a timeout
3. Transient failures are retried with exponential backoff
4. Providers without credentials may return tagged synthetic data

Concrete providers only implement the request itself (_fetch),
the normalization (_extract_common_data) and, optionally, synthetic
data (_mock_data).
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import aiohttp

from riskbrain.core.exceptions import (
    MissingCredentialsError,
    ProviderError,
    ProviderExhaustedError,
    SubjectNotFoundError,
    TransientProviderError,
)
from riskbrain.core.models import CommonData, ProviderOutcome, ProviderStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Defaults for a single provider call
DEFAULT_ATTEMPTS = 3
DEFAULT_TIMEOUT = 10.0
DEFAULT_BACKOFF_BASE = 1.0

# Failures worth another attempt
RETRYABLE_ERRORS = (TimeoutError, aiohttp.ClientError, TransientProviderError)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry settings for one provider.

    Frozen dataclass ensures immutability.
    Built from Settings by the ServiceFactory.
    """

    attempts: int = DEFAULT_ATTEMPTS
    timeout: float = DEFAULT_TIMEOUT
    """Seconds allowed for a single attempt"""
    backoff_base: float = DEFAULT_BACKOFF_BASE
    """Seconds; wait after failed attempt N is backoff_base * 2**N"""

    def delay(self, attempt: int) -> float:
        """Backoff before the next try, given the 1-based failed attempt."""
        return self.backoff_base * (2**attempt)


class BaseProvider(ABC):
    """
    Shared implementation of the Provider protocol.

    Usage:
        class MyProvider(BaseProvider):
            name = "my_source"

            async def _fetch(self, subject, chain):
                return await self._call_with_retry(lambda: self._request(subject))
    """

    def __init__(
        self,
        retry_policy: RetryPolicy | None = None,
        mock_fallback: bool = True,
    ):
        """
        Initialize provider.

        Args:
            retry_policy: Attempts, per-attempt timeout and backoff base
            mock_fallback: Return MOCK outcomes when credentials are missing
                (only for providers that can generate synthetic data)
        """
        self._retry_policy = retry_policy or RetryPolicy()
        self._mock_fallback = mock_fallback

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this provider."""

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    @abstractmethod
    async def _fetch(self, subject: str, chain: str | None) -> Any:
        """
        Fetch the raw payload.

        Returns:
            Provider-specific payload (None means nothing found)

        Raises:
            SubjectNotFoundError: Upstream has no data for the subject
            MissingCredentialsError: Credentials are not configured
            ProviderError: Any other provider failure
        """

    def _extract_common_data(self, raw_data: Any) -> CommonData:
        """Map raw payload to CommonData. Default: nothing is known."""
        return CommonData()

    def _mock_data(self, subject: str, chain: str | None) -> Any:
        """Synthetic payload used when credentials are missing. None = unsupported."""
        return None

    async def fetch(self, subject: str, chain: str | None = None) -> ProviderOutcome:
        """
        Fetch data for a subject without ever raising.

        Args:
            subject: Address being assessed (opaque)
            chain: Optional chain name

        Returns:
            ProviderOutcome with SUCCESS, MOCK, NOT_FOUND or ERROR status
        """
        logger.debug(f"[{self.name}] Fetching {subject[:8]}... chain={chain}")

        try:
            raw_data = await self._fetch(subject, chain)

        except SubjectNotFoundError as e:
            logger.info(f"[{self.name}] Nothing found for {subject[:8]}: {e}")
            return self._outcome(ProviderStatus.NOT_FOUND, error_message=str(e))

        except MissingCredentialsError as e:
            return self._degrade(subject, chain, e)

        except ProviderError as e:
            logger.warning(f"[{self.name}] Failed for {subject[:8]}: {e}")
            return self._outcome(ProviderStatus.ERROR, error_message=str(e))

        except Exception as e:
            logger.exception(f"[{self.name}] Unexpected error for {subject[:8]}: {e}")
            return self._outcome(
                ProviderStatus.ERROR,
                error_message=f"{type(e).__name__}: {e}",
            )

        if raw_data is None:
            return self._outcome(ProviderStatus.NOT_FOUND, error_message="Empty response")

        return self._outcome(ProviderStatus.SUCCESS, raw_data=raw_data)

    def extract_common_data(self, raw_data: Any) -> CommonData:
        """
        Derive normalized fields from a SUCCESS payload.

        Never raises: malformed payloads yield an empty CommonData.
        """
        try:
            return self._extract_common_data(raw_data)
        except Exception as e:
            logger.warning(f"[{self.name}] Could not normalize payload: {e}")
            return CommonData()

    async def _call_with_retry(self, call: Callable[[], Awaitable[T]]) -> T:
        """
        Run a network call with per-attempt timeout and exponential backoff.

        A timed-out attempt is cancelled (the in-flight request is aborted).
        SubjectNotFoundError and non-transient errors are not retried.

        Raises:
            ProviderExhaustedError: If every attempt failed
        """
        policy = self._retry_policy
        last_error: Exception | None = None

        for attempt in range(1, policy.attempts + 1):
            try:
                return await asyncio.wait_for(call(), timeout=policy.timeout)

            except RETRYABLE_ERRORS as e:
                last_error = e
                reason = (
                    f"timeout after {policy.timeout}s"
                    if isinstance(e, TimeoutError)
                    else f"{type(e).__name__}: {e}"
                )
                logger.warning(
                    f"[{self.name}] Attempt {attempt}/{policy.attempts} failed: {reason}"
                )

            if attempt < policy.attempts:
                delay = policy.delay(attempt)
                logger.debug(f"[{self.name}] Waiting {delay:.2f}s before retry")
                await asyncio.sleep(delay)

        raise ProviderExhaustedError(
            technical_message=(
                f"{self.name}: all {policy.attempts} attempts failed "
                f"(last error: {type(last_error).__name__}: {last_error})"
            )
        ) from last_error

    def _timeout(self) -> aiohttp.ClientTimeout:
        """aiohttp timeout matching one attempt."""
        return aiohttp.ClientTimeout(total=self._retry_policy.timeout)

    async def _read_json(self, resp: aiohttp.ClientResponse) -> Any:
        """
        Check HTTP status and decode the JSON body.

        Raises:
            SubjectNotFoundError: On HTTP 404
            TransientProviderError: On any other non-2xx status
        """
        if resp.status == 404:
            raise SubjectNotFoundError(technical_message=f"{self.name}: HTTP 404")

        if resp.status < 200 or resp.status >= 300:
            raise TransientProviderError(
                technical_message=f"{self.name}: HTTP {resp.status} {resp.reason}"
            )

        return await resp.json(content_type=None)

    def _degrade(
        self,
        subject: str,
        chain: str | None,
        error: MissingCredentialsError,
    ) -> ProviderOutcome:
        """Synthetic MOCK outcome when allowed and supported, ERROR otherwise."""
        if self._mock_fallback:
            mock = self._mock_data(subject, chain)
            if mock is not None:
                logger.info(f"[{self.name}] {error}; returning synthetic data")
                return self._outcome(ProviderStatus.MOCK, raw_data=mock)

        logger.warning(f"[{self.name}] {error}")
        return self._outcome(ProviderStatus.ERROR, error_message=str(error))

    def _outcome(
        self,
        status: ProviderStatus,
        raw_data: Any = None,
        error_message: str | None = None,
    ) -> ProviderOutcome:
        return ProviderOutcome(
            provider_name=self.name,
            status=status,
            raw_data=raw_data,
            error_message=error_message,
        )
