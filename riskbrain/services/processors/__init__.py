"""Risk processors and the confidence-weighted processor manager."""

from riskbrain.services.processors.base import (
    BaseRiskProcessor,
    calculate_confidence,
    clamp_score,
)
from riskbrain.services.processors.comprehensive import (
    ComprehensiveRiskProcessor,
    ScoringThresholds,
)
from riskbrain.services.processors.manager import ProcessorManager, merge_assessments
from riskbrain.services.processors.openrouter import LLMRiskProcessor

__all__ = [
    "BaseRiskProcessor",
    "ComprehensiveRiskProcessor",
    "LLMRiskProcessor",
    "ProcessorManager",
    "ScoringThresholds",
    "calculate_confidence",
    "clamp_score",
    "merge_assessments",
]
