"""
Stub providers and processors shared by the test suite.

Plain classes that satisfy the Provider and RiskProcessor protocols
with scripted behaviour.
"""

import asyncio
from typing import Any

from riskbrain.core.models import (
    CollectedData,
    CommonData,
    Explanation,
    ExplanationType,
    ProcessorResult,
    ProviderOutcome,
    ProviderStatus,
    RiskAssessment,
)
from riskbrain.services.processors.base import BaseRiskProcessor


class StubProvider:
    """Provider returning a fixed outcome, optionally after a delay."""

    def __init__(
        self,
        name: str,
        status: ProviderStatus = ProviderStatus.SUCCESS,
        raw_data: Any = None,
        common: CommonData | None = None,
        delay: float = 0.0,
    ):
        self.name = name
        self._status = status
        self._raw_data = raw_data
        self._common = common or CommonData()
        self._delay = delay
        self.calls: list[tuple[str, str | None]] = []

    async def fetch(self, subject: str, chain: str | None = None) -> ProviderOutcome:
        self.calls.append((subject, chain))
        if self._delay:
            await asyncio.sleep(self._delay)

        if self._status in (ProviderStatus.SUCCESS, ProviderStatus.MOCK):
            raw = self._raw_data if self._raw_data is not None else {"source": self.name}
            return ProviderOutcome(
                provider_name=self.name, status=self._status, raw_data=raw
            )
        return ProviderOutcome(
            provider_name=self.name,
            status=self._status,
            error_message=f"{self.name} {self._status.value}",
        )

    def extract_common_data(self, raw_data: Any) -> CommonData:
        return self._common


class CrashingProvider:
    """Provider that violates the contract by raising from fetch()."""

    def __init__(self, name: str, message: str = "connection reset"):
        self.name = name
        self._message = message

    async def fetch(self, subject: str, chain: str | None = None) -> ProviderOutcome:
        raise RuntimeError(self._message)

    def extract_common_data(self, raw_data: Any) -> CommonData:
        return CommonData()


class StubProcessor(BaseRiskProcessor):
    """Processor returning a fixed score through the shared assess_risk()."""

    def __init__(
        self,
        name: str,
        score: float | None,
        explanations: list[str] | None = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self._name = name
        self._score = score
        self._explanations = explanations or []

    @property
    def name(self) -> str:
        return self._name

    async def process(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> ProcessorResult | None:
        if self._score is None:
            return None
        return ProcessorResult(score=self._score, explanations=self._explanations)


class FailingProcessor(BaseRiskProcessor):
    """Processor whose scoring logic raises."""

    def __init__(self, name: str = "failing"):
        super().__init__()
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def process(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> ProcessorResult | None:
        raise ValueError("scoring exploded")


class FixedAssessmentProcessor:
    """Processor returning a preset assessment (fixed confidence)."""

    def __init__(
        self,
        name: str,
        score: float,
        confidence: float,
        explanations: list[str] | None = None,
    ):
        self.name = name
        self._assessment = RiskAssessment(
            score=score,
            confidence=confidence,
            explanations=[
                Explanation(text=text, type=ExplanationType.INCREASE)
                for text in explanations or []
            ],
            processor_name=name,
        )

    async def assess_risk(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> RiskAssessment | None:
        return self._assessment


class RaisingAssessProcessor:
    """Processor whose assess_risk() itself raises."""

    name = "raising"

    async def assess_risk(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> RiskAssessment | None:
        raise RuntimeError("assess_risk exploded")


class MappingProcessor(BaseRiskProcessor):
    """Processor whose process() returns a plain value instead of ProcessorResult."""

    def __init__(self, name: str, result: Any):
        super().__init__()
        self._name = name
        self._result = result

    @property
    def name(self) -> str:
        return self._name

    async def process(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> Any:
        return self._result
