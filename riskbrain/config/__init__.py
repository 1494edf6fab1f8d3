"""Configuration module."""

from riskbrain.config.settings import ProviderOverride, Settings, get_settings

__all__ = ["ProviderOverride", "Settings", "get_settings"]
