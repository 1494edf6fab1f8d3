"""
Bubblemaps holder distribution provider.

Fetches the holder-cluster map of a token: decentralization score and
the share of supply held by each cluster of related wallets.
Requires an API key; there is no synthetic fallback.
"""

import logging
from typing import Any

import aiohttp

from riskbrain.core.exceptions import (
    MissingCredentialsError,
    ProviderError,
    TransientProviderError,
)
from riskbrain.core.models import CommonData
from riskbrain.services.providers.base import BaseProvider, RetryPolicy
from riskbrain.utils.parsing import to_number

logger = logging.getLogger(__name__)

BUBBLEMAP_API_URL = "https://api.bubblemaps.io/maps"

DEFAULT_CHAIN = "ethereum"

# Internal chain name -> Bubblemaps chain
CHAIN_MAPPING = {
    "ethereum": "eth",
    "base": "base",
    "solana": "solana",
    "tron": "tron",
    "bsc": "bsc",
}

# Clusters summed into top_holders_percentage
TOP_CLUSTERS = 3


class BubblemapProvider(BaseProvider):
    """
    Bubblemaps implementation of the Provider protocol.

    Raw payload: the map object, always containing decentralization_score.
    """

    def __init__(
        self,
        api_key: str = "",
        retry_policy: RetryPolicy | None = None,
    ):
        """
        Initialize Bubblemaps provider.

        Args:
            api_key: Bubblemaps API key
            retry_policy: Attempts, per-attempt timeout and backoff base
        """
        super().__init__(retry_policy=retry_policy, mock_fallback=False)
        self._api_key = api_key

    @property
    def name(self) -> str:
        return "bubblemap"

    def supported_chains(self) -> list[str]:
        return list(CHAIN_MAPPING)

    async def _fetch(self, subject: str, chain: str | None) -> dict:
        if not self._api_key:
            raise MissingCredentialsError(
                technical_message="Bubblemap API key not configured"
            )

        target_chain = CHAIN_MAPPING.get((chain or DEFAULT_CHAIN).lower())
        if target_chain is None:
            raise ProviderError(
                technical_message=(
                    f"Unsupported chain for Bubblemap: {chain}. "
                    f"Supported chains: {', '.join(CHAIN_MAPPING)}"
                )
            )

        url = (
            f"{BUBBLEMAP_API_URL}/{target_chain}/{subject}"
            "?return_nodes=true&return_relationships=true"
        )
        headers = {"X-ApiKey": self._api_key}

        async with aiohttp.ClientSession() as session:
            return await self._call_with_retry(
                lambda: self._get_map(session, url, headers)
            )

    async def _get_map(
        self,
        session: aiohttp.ClientSession,
        url: str,
        headers: dict[str, str],
    ) -> dict:
        async with session.get(url, headers=headers, timeout=self._timeout()) as resp:
            data = await self._read_json(resp)

        if not isinstance(data, dict) or data.get("decentralization_score") is None:
            raise TransientProviderError(
                technical_message="Bubblemap API returned unexpected response structure"
            )

        return data

    def _extract_common_data(self, raw_data: Any) -> CommonData:
        if not isinstance(raw_data, dict):
            return CommonData()

        score = to_number(raw_data.get("decentralization_score"))
        if score is None:
            return CommonData()

        shares = []
        clusters = raw_data.get("clusters")
        if isinstance(clusters, list):
            for cluster in clusters:
                share = to_number(cluster.get("share")) if isinstance(cluster, dict) else None
                if share is not None:
                    shares.append(share)

        # Cluster shares are fractions of supply
        top_share = round(sum(sorted(shares, reverse=True)[:TOP_CLUSTERS]) * 100, 4)

        return CommonData(
            decentralization_score=score,
            top_holders_percentage=top_share if top_share > 0 else None,
        )
