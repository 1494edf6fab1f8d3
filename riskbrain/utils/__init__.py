"""Utility functions."""

from riskbrain.utils.parsing import nested, nested_number, to_number

__all__ = ["nested", "nested_number", "to_number"]
