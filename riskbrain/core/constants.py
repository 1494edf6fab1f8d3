"""
Consensus policy constants.

Heuristic values kept as named defaults. Every consumer accepts an
override (constructor argument or Settings field).
"""

CONFIDENCE_FLOOR = 0.1
"""Lowest confidence a single processor can report"""

MULTI_PROCESSOR_CONFIDENCE_BOOST = 1.2
"""Multiplier on the mean confidence when several processors contribute"""

NEUTRAL_SCORE = 50
"""Score reported when no opinion can be formed"""

MAX_CONFIDENCE = 1.0
MIN_SCORE = 0
MAX_SCORE = 100
