"""
Application settings loaded from environment variables.

Uses pydantic-settings for automatic loading from .env file.
All settings have sensible defaults; missing credentials make the
affected providers degrade to error or mock outcomes instead of failing.
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from riskbrain.core.constants import (
    CONFIDENCE_FLOOR,
    MULTI_PROCESSOR_CONFIDENCE_BOOST,
    NEUTRAL_SCORE,
)


class ProviderOverride(BaseModel):
    """Per-provider retry policy override. Unset fields use the global value."""

    timeout_seconds: float | None = Field(default=None, gt=0)
    retries: int | None = Field(default=None, ge=1)
    backoff_base_seconds: float | None = Field(default=None, ge=0)


class Settings(BaseSettings):
    """
    Engine configuration.

    All values are loaded from environment variables.

    Attributes:
        environment: Runtime environment (development/production)
        log_level: Logging verbosity
        provider_timeout_seconds: Timeout of a single provider attempt
        provider_retries: Attempts per provider call
        provider_backoff_base_seconds: Base of the exponential backoff
        provider_overrides: Per-provider policy overrides (JSON)
        enabled_providers: Providers registered by the ServiceFactory
        enabled_processors: Processors registered by the ServiceFactory
        mock_fallback_enabled: Tag synthetic data as MOCK instead of ERROR
            when a provider has no live credentials
        amlbot_tm_id / amlbot_access_key: AMLBot credentials
        bubblemap_api_key: Bubblemaps API key
        openrouter_api_key: OpenRouter API key for the LLM processor
        llm_model: LLM model to use via OpenRouter
        llm_timeout_seconds: Timeout of the LLM request
        confidence_floor: Lowest confidence a processor can report
        multi_processor_confidence_boost: Multiplier applied to the mean
            confidence when several processors agree
        neutral_score: Score reported when no opinion can be formed
        count_not_found_as_contributing: Whether NOT_FOUND outcomes count
            as contributing providers in the confidence formula
    """

    # Environment
    environment: Literal["development", "production"] = "development"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Provider retry policy
    provider_timeout_seconds: float = Field(default=10.0, gt=0)
    provider_retries: int = Field(default=3, ge=1)
    provider_backoff_base_seconds: float = Field(default=1.0, ge=0)
    provider_overrides: dict[str, ProviderOverride] = Field(default_factory=dict)

    # Registration
    enabled_providers: list[str] = Field(
        default_factory=lambda: ["amlbot", "dexscreener", "bubblemap"]
    )
    enabled_processors: list[str] = Field(
        default_factory=lambda: ["comprehensive", "openrouter"]
    )
    mock_fallback_enabled: bool = True

    # API credentials (optional: providers degrade without them)
    amlbot_tm_id: str = ""
    amlbot_access_key: str = ""
    bubblemap_api_key: str = ""

    # OpenRouter LLM settings
    openrouter_api_key: str = ""
    llm_model: str = "anthropic/claude-3.5-sonnet"
    llm_timeout_seconds: float = Field(default=15.0, gt=0)

    # Consensus policy
    confidence_floor: float = Field(default=CONFIDENCE_FLOOR, ge=0, le=1)
    multi_processor_confidence_boost: float = Field(
        default=MULTI_PROCESSOR_CONFIDENCE_BOOST, gt=0
    )
    neutral_score: float = Field(default=NEUTRAL_SCORE, ge=0, le=100)
    count_not_found_as_contributing: bool = True

    # Pydantic settings config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Case-insensitive env var names
        case_sensitive=False,
        # Empty env vars count as unset
        env_ignore_empty=True,
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and reused throughout the process.

    Returns:
        Settings instance with all configuration values.
    """
    return Settings()
