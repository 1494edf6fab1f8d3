"""
Comprehensive heuristic risk processor.

Scores a subject from AML screening and normalized market data.

Key principles:
1. Start from the neutral score; an AML risk score replaces it
2. Every known signal nudges the score up or down
3. Unknown (None) data is skipped, never treated as zero
4. Synthetic (MOCK) outcomes are never scored
5. No known signal at all = no opinion (None)
"""

import logging
from dataclasses import dataclass
from typing import Any

from riskbrain.core.constants import NEUTRAL_SCORE
from riskbrain.core.models import (
    CollectedData,
    CommonData,
    Explanation,
    ExplanationType,
    ProcessorResult,
    ProviderStatus,
)
from riskbrain.services.processors.base import BaseRiskProcessor
from riskbrain.utils.parsing import nested_number, to_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringThresholds:
    """
    Threshold values and score adjustments.

    Frozen dataclass ensures immutability.
    """

    # AML signals (share of exposure, 0-1)
    aml_signal_threshold: float = 0.1
    scam_penalty: int = 20
    sanctions_penalty: int = 30
    mixer_penalty: int = 15

    # Address activity (lifetime transactions)
    active_address_tx: int = 1_000
    new_address_tx: int = 10

    # Liquidity (USD)
    liquidity_very_low: float = 10_000
    liquidity_high: float = 1_000_000

    # Volume 24h (USD)
    volume_very_low: float = 1_000
    volume_high: float = 1_000_000

    # Transactions 24h
    tx_count_very_low: int = 10

    # Price change 24h (percent, absolute)
    volatility_extreme: float = 50.0

    # Market cap (USD)
    market_cap_large: float = 1_000_000_000
    market_cap_small: float = 1_000_000

    # Holder distribution
    decentralization_low: float = 30.0
    decentralization_high: float = 70.0
    holder_concentration_high: float = 50.0

    # Token age (days)
    age_new: float = 7
    age_established: float = 365


class _Scorecard:
    """Running score with the explanations that moved it."""

    def __init__(self, score: float):
        self.score = score
        self.explanations: list[Explanation] = []
        self.signals_used = 0

    def adjust(self, delta: float, text: str) -> None:
        self.score += delta
        self.signals_used += 1
        if delta > 0:
            kind = ExplanationType.INCREASE
        elif delta < 0:
            kind = ExplanationType.DECREASE
        else:
            kind = ExplanationType.NEUTRAL
        self.explanations.append(Explanation(text=text, type=kind))

    def note(self, text: str) -> None:
        self.explanations.append(Explanation(text=text, type=ExplanationType.NEUTRAL))


class ComprehensiveRiskProcessor(BaseRiskProcessor):
    """
    Heuristic processor combining AML and market signals.

    Usage:
        processor = ComprehensiveRiskProcessor()
        assessment = await processor.assess_risk(address, "evm", collected_data)
    """

    def __init__(
        self,
        thresholds: ScoringThresholds | None = None,
        **kwargs: Any,
    ):
        """
        Initialize with optional custom thresholds.

        Args:
            thresholds: Custom thresholds (uses defaults if None)
            **kwargs: Passed to BaseRiskProcessor (confidence settings)
        """
        super().__init__(**kwargs)
        self._thresholds = thresholds or ScoringThresholds()

    @property
    def name(self) -> str:
        return "comprehensive"

    async def process(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> ProcessorResult | None:
        card = _Scorecard(NEUTRAL_SCORE)

        self._note_synthetic(card, collected_data)
        self._score_aml(card, collected_data.successful_raw_data("amlbot"))

        common = collected_data.merged_common_data()
        self._score_market(card, common)
        self._score_distribution(card, common)

        if card.signals_used == 0:
            logger.debug(f"No usable signals for {subject[:8]}")
            return None

        logger.debug(
            f"Comprehensive score for {subject[:8]} ({subject_type}): "
            f"{card.score} from {card.signals_used} signals"
        )
        return ProcessorResult(score=card.score, explanations=card.explanations)

    def _note_synthetic(self, card: _Scorecard, data: CollectedData) -> None:
        for name, outcome in data.outcomes.items():
            if outcome.status == ProviderStatus.MOCK:
                card.note(f"{name} returned synthetic data; not scored")

    def _score_aml(self, card: _Scorecard, aml: Any) -> None:
        """AMLBot risk score replaces the base score; signals add penalties."""
        if not isinstance(aml, dict) or aml.get("pending"):
            return

        t = self._thresholds

        risk = to_number(aml.get("riskscore"))
        if risk is not None:
            aml_score = round(risk * 100)
            card.adjust(aml_score - card.score, f"AMLBot risk score: {aml_score}%")

        tx_count = nested_number(aml, "addressDetailsData", "n_txs")
        if tx_count is not None:
            if tx_count > t.active_address_tx:
                card.note("High transaction volume indicates active address")
            elif tx_count < t.new_address_tx:
                card.note("Low transaction volume suggests new address")

        signals = aml.get("signals")
        if not isinstance(signals, dict):
            return

        penalties = (
            ("scam", t.scam_penalty, "Scam-related activity detected"),
            ("sanctions", t.sanctions_penalty, "Sanctions-related activity detected"),
            ("mixer", t.mixer_penalty, "Mixer/tumbler usage detected"),
        )
        for signal, penalty, text in penalties:
            exposure = to_number(signals.get(signal))
            if exposure is not None and exposure > t.aml_signal_threshold:
                card.adjust(penalty, text)

    def _score_market(self, card: _Scorecard, common: CommonData) -> None:
        t = self._thresholds

        if common.liquidity is not None:
            if common.liquidity < t.liquidity_very_low:
                card.adjust(20, "Very low liquidity indicates high risk")
            elif common.liquidity > t.liquidity_high:
                card.adjust(-10, "High liquidity suggests good market depth")

        if common.volume_24h is not None:
            if common.volume_24h < t.volume_very_low:
                card.adjust(15, "Very low trading volume suggests limited interest")
            elif common.volume_24h > t.volume_high:
                card.adjust(-5, "High trading volume indicates active market")

        if common.tx_count_24h is not None and common.tx_count_24h < t.tx_count_very_low:
            card.adjust(10, "Very few transactions suggests low activity")

        if (
            common.price_change_24h is not None
            and abs(common.price_change_24h) > t.volatility_extreme
        ):
            card.adjust(15, "Extreme price volatility indicates high risk")

        if common.market_cap is not None:
            if common.market_cap > t.market_cap_large:
                card.adjust(-10, "Large market cap indicates established token")
            elif common.market_cap < t.market_cap_small:
                card.adjust(10, "Small market cap suggests higher risk")

        if common.token_age_days is not None:
            if common.token_age_days < t.age_new:
                card.adjust(10, "Token is less than a week old")
            elif common.token_age_days > t.age_established:
                card.adjust(-5, "Token has traded for over a year")

    def _score_distribution(self, card: _Scorecard, common: CommonData) -> None:
        t = self._thresholds

        if common.decentralization_score is not None:
            if common.decentralization_score < t.decentralization_low:
                card.adjust(10, "Low decentralization score")
            elif common.decentralization_score > t.decentralization_high:
                card.adjust(-5, "Well-distributed token supply")

        concentration = (
            common.top_holders_percentage
            if common.top_holders_percentage is not None
            else common.top10_holders_percentage
        )
        if concentration is not None and concentration > t.holder_concentration_high:
            card.adjust(15, "Supply concentrated in a few holders")
