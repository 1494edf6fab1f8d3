"""
Services module - collection and consensus layer.

Contains providers, processors, the orchestrator and the
ServiceFactory for dependency injection.
"""

from riskbrain.services.factory import ServiceFactory
from riskbrain.services.orchestrator import RiskAnalyzer

__all__ = ["ServiceFactory", "RiskAnalyzer"]
