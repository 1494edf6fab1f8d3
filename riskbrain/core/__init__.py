"""
Core module - models, protocols, and exceptions.

This module contains the fundamental building blocks of the engine:
- Data models (Pydantic)
- Protocol definitions (collaborator contracts)
- Custom exceptions
"""

from riskbrain.core.exceptions import (
    ConfigurationError,
    LLMError,
    MissingCredentialsError,
    ProcessorError,
    ProviderError,
    ProviderExhaustedError,
    RiskBrainError,
    SubjectNotFoundError,
    TransientProviderError,
)
from riskbrain.core.models import (
    CollectedData,
    CommonData,
    Explanation,
    ExplanationType,
    MergedAssessment,
    ProcessorResult,
    ProviderOutcome,
    ProviderStatus,
    RiskAssessment,
)
from riskbrain.core.protocols import Provider, RiskProcessor

__all__ = [
    # Exceptions
    "RiskBrainError",
    "ConfigurationError",
    "ProviderError",
    "MissingCredentialsError",
    "TransientProviderError",
    "SubjectNotFoundError",
    "ProviderExhaustedError",
    "ProcessorError",
    "LLMError",
    # Models
    "ProviderStatus",
    "ProviderOutcome",
    "CommonData",
    "CollectedData",
    "ExplanationType",
    "Explanation",
    "ProcessorResult",
    "RiskAssessment",
    "MergedAssessment",
    # Protocols
    "Provider",
    "RiskProcessor",
]
