"""
Pydantic models for RiskBrain.

All data structures passed between providers, the collector,
processors and the processor manager are defined here.
Every instance is created fresh per assessment request.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProviderStatus(str, Enum):
    """
    Status of one provider call.

    MOCK marks synthetic fallback data produced when a provider has no
    live credentials, so callers can tell it apart from real data.
    """

    SUCCESS = "success"
    ERROR = "error"
    NOT_FOUND = "not_found"
    MOCK = "mock"


class ExplanationType(str, Enum):
    """Direction in which an explanation moved the score."""

    INCREASE = "increase"
    DECREASE = "decrease"
    NEUTRAL = "neutral"


class ProviderOutcome(BaseModel):
    """
    Result of one provider call for one subject.

    SUCCESS and MOCK outcomes carry raw_data and no error_message.
    ERROR and NOT_FOUND outcomes carry error_message and no raw_data.
    """

    provider_name: str = Field(min_length=1)
    """Unique provider identifier"""

    status: ProviderStatus

    raw_data: Any = None
    """Provider-specific payload (opaque to the core)"""

    error_message: str | None = None

    timestamp: datetime = Field(default_factory=utc_now)
    """Time the call completed"""

    @model_validator(mode="after")
    def _check_payload_matches_status(self) -> "ProviderOutcome":
        has_data = self.status in (ProviderStatus.SUCCESS, ProviderStatus.MOCK)
        if has_data and (self.raw_data is None or self.error_message is not None):
            raise ValueError(
                f"{self.status.value} outcome requires raw_data and no error_message"
            )
        if not has_data and (self.error_message is None or self.raw_data is not None):
            raise ValueError(
                f"{self.status.value} outcome requires error_message and no raw_data"
            )
        return self

    @property
    def is_success(self) -> bool:
        return self.status == ProviderStatus.SUCCESS


class CommonData(BaseModel):
    """
    Normalized subset of provider data.

    None means "unknown", never zero. Providers that cannot map
    their payload to this shape return an empty instance.
    """

    # Market data
    price: float | None = None
    price_change_24h: float | None = None
    """24h price change, percent"""
    volume_24h: float | None = None
    market_cap: float | None = None
    fully_diluted_valuation: float | None = None

    # Trading activity
    tx_count_24h: int | None = None
    buy_tx_count_24h: int | None = None
    sell_tx_count_24h: int | None = None

    # Liquidity
    liquidity: float | None = None

    # Holders and distribution
    holders_count: int | None = None
    top_holders_percentage: float | None = None
    top10_holders_percentage: float | None = None
    total_supply: float | None = None

    # Social
    twitter_followers: int | None = None

    # Risk indicators
    aml_risk_score: float | None = Field(default=None, ge=0, le=1)
    decentralization_score: float | None = None

    # Metadata
    token_age_days: float | None = None
    contract_address: str | None = None
    chain: str | None = None

    def is_empty(self) -> bool:
        """True when no field is known."""
        return not self.model_dump(exclude_none=True)


class CollectedData(BaseModel):
    """
    Everything gathered about one subject by the DataCollector.

    A provider that returned an outcome (of any status) appears in
    `outcomes`. A provider that crashed appears only in `errors`.
    """

    outcomes: dict[str, ProviderOutcome] = Field(default_factory=dict)
    """provider name -> outcome"""

    common_data: dict[str, CommonData] = Field(default_factory=dict)
    """provider name -> normalized data (successful, non-empty only)"""

    errors: list[str] = Field(default_factory=list)
    """"<provider name>: <message>" for providers that crashed"""

    def get(self, provider_name: str) -> ProviderOutcome | None:
        return self.outcomes.get(provider_name)

    def successful_raw_data(self, provider_name: str) -> Any:
        """Raw payload of a SUCCESS outcome, None for anything else."""
        outcome = self.outcomes.get(provider_name)
        if outcome is None or not outcome.is_success:
            return None
        return outcome.raw_data

    def provider_count(self, count_not_found: bool = True) -> int:
        """
        Number of providers that contributed an entry.

        Args:
            count_not_found: Whether NOT_FOUND outcomes count as contributions
        """
        if count_not_found:
            return len(self.outcomes)
        return sum(
            1
            for outcome in self.outcomes.values()
            if outcome.status != ProviderStatus.NOT_FOUND
        )

    def merged_common_data(self) -> CommonData:
        """
        Combine normalized data from all providers.

        For each field the first known value wins.
        """
        merged: dict[str, Any] = {}
        for data in self.common_data.values():
            for field, value in data.model_dump(exclude_none=True).items():
                merged.setdefault(field, value)
        return CommonData(**merged)


class Explanation(BaseModel):
    """One human-readable reason behind a score."""

    text: str = Field(min_length=1)
    type: ExplanationType = ExplanationType.NEUTRAL

    model_config = {"frozen": True}


class ProcessorResult(BaseModel):
    """
    Raw output of a processor, before clamping and confidence.

    Plain strings are accepted as neutral explanations.
    """

    score: float
    explanations: list[Explanation] = Field(default_factory=list)

    @field_validator("explanations", mode="before")
    @classmethod
    def _wrap_plain_strings(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"text": item} if isinstance(item, str) else item for item in value]
        return value


class RiskAssessment(BaseModel):
    """Opinion of a single processor."""

    score: float = Field(ge=0, le=100)
    explanations: list[Explanation] = Field(default_factory=list)
    confidence: float = Field(ge=0, le=1)
    processor_name: str

    model_config = {"from_attributes": True}


class MergedAssessment(BaseModel):
    """
    Final confidence-weighted verdict.

    JSON example:
    {
        "final_score": 64,
        "explanations": [{"text": "Very low liquidity", "type": "increase"}],
        "confidence": 0.84,
        "processor_assessments": [...],
        "processor_count": 2
    }
    """

    final_score: float = Field(ge=0, le=100)
    explanations: list[Explanation] = Field(default_factory=list)
    confidence: float = Field(ge=0, le=1)
    processor_assessments: list[RiskAssessment] = Field(default_factory=list)
    """Per-processor opinions (audit trail)"""
    processor_count: int = Field(ge=0)

    model_config = {"from_attributes": True}
