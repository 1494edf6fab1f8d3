"""
Defensive accessors for untyped provider payloads.

Raw provider data is opaque JSON. These helpers never raise on
missing keys or wrong types; they return None instead.
"""

from typing import Any


def to_number(value: Any) -> float | None:
    """
    Parse a numeric field.

    Args:
        value: int, float or numeric string

    Returns:
        float value, or None when absent or malformed
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def nested(data: Any, *keys: str) -> Any:
    """
    Safe nested dict lookup.

    nested({"a": {"b": 1}}, "a", "b") -> 1
    nested({"a": None}, "a", "b") -> None
    """
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def nested_number(data: Any, *keys: str) -> float | None:
    """Nested lookup followed by to_number()."""
    return to_number(nested(data, *keys))
