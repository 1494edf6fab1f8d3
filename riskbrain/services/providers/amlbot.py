"""
AMLBot address screening provider.

Checks an address against the AMLBot risk API and returns its risk
score and risk signals (scam, sanctions, mixer, ...).

Without credentials the provider degrades to deterministic synthetic
data tagged as MOCK, so development setups still produce a bundle.
"""

import hashlib
import logging
import random
from typing import Any

import aiohttp

from riskbrain.core.exceptions import MissingCredentialsError, TransientProviderError
from riskbrain.core.models import CommonData
from riskbrain.services.providers.base import BaseProvider, RetryPolicy
from riskbrain.utils.parsing import to_number

logger = logging.getLogger(__name__)

AMLBOT_API_URL = "https://amlbot.silencatech.com/aml/api/ajaxcheck"

DEFAULT_CHAIN = "ethereum"

# Signals included in synthetic reports
MOCK_SIGNALS = ("exchange", "risky_exchange", "scam", "sanctions", "mixer", "dark_market")


class AMLBotProvider(BaseProvider):
    """
    AMLBot implementation of the Provider protocol.

    Raw payload: the "data" object of the API response, e.g.
    {"riskscore": 0.42, "signals": {...}, "addressDetailsData": {...}}.
    Pending checks carry {"pending": True} and no riskscore.
    Synthetic payloads carry {"synthetic": True}.
    """

    def __init__(
        self,
        tm_id: str = "",
        access_key: str = "",
        retry_policy: RetryPolicy | None = None,
        mock_fallback: bool = True,
    ):
        """
        Initialize AMLBot provider.

        Args:
            tm_id: AMLBot account id
            access_key: AMLBot access key
            retry_policy: Attempts, per-attempt timeout and backoff base
            mock_fallback: Return synthetic data when credentials are missing
        """
        super().__init__(retry_policy=retry_policy, mock_fallback=mock_fallback)
        self._tm_id = tm_id
        self._access_key = access_key

    @property
    def name(self) -> str:
        return "amlbot"

    async def _fetch(self, subject: str, chain: str | None) -> dict:
        if not self._tm_id or not self._access_key:
            raise MissingCredentialsError(
                technical_message="AMLBot credentials not configured"
            )

        form = {
            "address": subject,
            "hash": subject,
            "chain": chain or DEFAULT_CHAIN,
            "tmId": self._tm_id,
            "token": self._sign(subject),
        }

        async with aiohttp.ClientSession() as session:
            return await self._call_with_retry(lambda: self._check(session, form))

    async def _check(self, session: aiohttp.ClientSession, form: dict) -> dict:
        async with session.post(AMLBOT_API_URL, data=form, timeout=self._timeout()) as resp:
            body = await self._read_json(resp)

        if not isinstance(body, dict):
            raise TransientProviderError(
                technical_message="AMLBot returned unexpected response structure"
            )

        description = str(body.get("description") or "")
        if "pending" in description.lower():
            logger.info(f"AMLBot check pending for {form['address'][:8]}")
            return {"pending": True, "signals": {}, "addressDetailsData": {}}

        data = body.get("data")
        if not body.get("result") or not isinstance(data, dict):
            raise TransientProviderError(
                technical_message=f"AMLBot error: {description or 'no data'}"
            )

        return data

    def _sign(self, subject: str) -> str:
        """Request token: md5("address:access_key:tm_id")."""
        token = f"{subject}:{self._access_key}:{self._tm_id}"
        return hashlib.md5(token.encode()).hexdigest()

    def _extract_common_data(self, raw_data: Any) -> CommonData:
        if not isinstance(raw_data, dict) or raw_data.get("pending"):
            return CommonData()

        score = to_number(raw_data.get("riskscore"))
        if score is None or not 0 <= score <= 1:
            return CommonData()

        return CommonData(aml_risk_score=score)

    def _mock_data(self, subject: str, chain: str | None) -> dict:
        """
        Deterministic synthetic report.

        Uses hash of address as random seed, so the same address
        always produces the same report.
        """
        seed = int(hashlib.md5(subject.encode()).hexdigest(), 16) % (2**32)
        rng = random.Random(seed)

        return {
            "synthetic": True,
            "riskscore": round(rng.uniform(0, 1), 3),
            "signals": {signal: round(rng.uniform(0, 0.3), 3) for signal in MOCK_SIGNALS},
            "addressDetailsData": {"n_txs": rng.randint(1, 10_000)},
        }
