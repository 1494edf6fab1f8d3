"""
DexScreener market data provider.

Fetches DEX trading pairs for a token from the public DexScreener API.
No credentials required.

Responsibilities:
1. Map internal chain names to DexScreener chain ids
2. Fetch trading pairs with retry and timeout
3. Normalize the most liquid pair into CommonData

NO risk scoring.
"""

import logging
import time
from typing import Any

import aiohttp

from riskbrain.core.exceptions import ProviderError, SubjectNotFoundError
from riskbrain.core.models import CommonData
from riskbrain.services.providers.base import BaseProvider
from riskbrain.utils.parsing import nested, nested_number, to_number

logger = logging.getLogger(__name__)

DEXSCREENER_API_URL = "https://api.dexscreener.com/token-pairs/v1"

DEFAULT_CHAIN = "ethereum"

# Internal chain name -> DexScreener chainId
CHAIN_MAPPING = {
    "ethereum": "ethereum",
    "solana": "solana",
    "bsc": "bsc",
    "base": "base",
    "avalanche": "avalanche",
}

MS_PER_DAY = 86_400_000


class DexScreenerProvider(BaseProvider):
    """
    DexScreener implementation of the Provider protocol.

    Raw payload: list of pair objects as returned by the API.
    An empty list means the token has no pairs (NOT_FOUND).
    """

    @property
    def name(self) -> str:
        return "dexscreener"

    def supported_chains(self) -> list[str]:
        return list(CHAIN_MAPPING)

    async def _fetch(self, subject: str, chain: str | None) -> list[dict]:
        target_chain = CHAIN_MAPPING.get((chain or DEFAULT_CHAIN).lower())
        if target_chain is None:
            raise ProviderError(
                technical_message=(
                    f"Unsupported chain for DexScreener: {chain}. "
                    f"Supported chains: {', '.join(CHAIN_MAPPING)}"
                )
            )

        url = f"{DEXSCREENER_API_URL}/{target_chain}/{subject}"

        async with aiohttp.ClientSession() as session:
            pairs = await self._call_with_retry(lambda: self._get_pairs(session, url))

        if not isinstance(pairs, list) or not pairs:
            raise SubjectNotFoundError(technical_message="No trading pairs found")

        logger.debug(f"DexScreener found {len(pairs)} pairs for {subject[:8]}")
        return pairs

    async def _get_pairs(self, session: aiohttp.ClientSession, url: str) -> Any:
        async with session.get(url, timeout=self._timeout()) as resp:
            return await self._read_json(resp)

    def _extract_common_data(self, raw_data: Any) -> CommonData:
        """
        Normalize the most liquid pair.

        Only fields present in the payload are filled in.
        """
        if not isinstance(raw_data, list):
            return CommonData()

        pairs = [pair for pair in raw_data if isinstance(pair, dict)]
        if not pairs:
            return CommonData()

        best = max(pairs, key=lambda p: nested_number(p, "liquidity", "usd") or 0.0)

        buys = nested_number(best, "txns", "h24", "buys")
        sells = nested_number(best, "txns", "h24", "sells")
        tx_count = None
        if buys is not None or sells is not None:
            tx_count = int((buys or 0) + (sells or 0))

        token_age_days = None
        created_at = to_number(best.get("pairCreatedAt"))
        if created_at:
            token_age_days = round((time.time() * 1000 - created_at) / MS_PER_DAY, 2)

        return CommonData(
            price=to_number(best.get("priceUsd")),
            price_change_24h=nested_number(best, "priceChange", "h24"),
            volume_24h=nested_number(best, "volume", "h24"),
            liquidity=nested_number(best, "liquidity", "usd"),
            market_cap=to_number(best.get("marketCap")),
            fully_diluted_valuation=to_number(best.get("fdv")),
            tx_count_24h=tx_count,
            buy_tx_count_24h=int(buys) if buys is not None else None,
            sell_tx_count_24h=int(sells) if sells is not None else None,
            token_age_days=token_age_days,
            contract_address=nested(best, "baseToken", "address"),
            chain=best.get("chainId"),
        )
