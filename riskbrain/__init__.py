"""
RiskBrain - multi-source blockchain address risk assessment.

Collects data about an address from several independent providers
in parallel and merges independent risk opinions into one
confidence-weighted verdict.
"""

__version__ = "0.1.0"
