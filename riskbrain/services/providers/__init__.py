"""Data providers and the concurrent data collector."""

from riskbrain.services.providers.amlbot import AMLBotProvider
from riskbrain.services.providers.base import BaseProvider, RetryPolicy
from riskbrain.services.providers.bubblemap import BubblemapProvider
from riskbrain.services.providers.collector import DataCollector
from riskbrain.services.providers.dexscreener import DexScreenerProvider

__all__ = [
    "AMLBotProvider",
    "BaseProvider",
    "BubblemapProvider",
    "DataCollector",
    "DexScreenerProvider",
    "RetryPolicy",
]
