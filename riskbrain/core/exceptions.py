"""
Custom exceptions for RiskBrain.

Exception hierarchy:
    RiskBrainError (base)
    ├── ConfigurationError - Malformed collaborator passed at registration time
    ├── ProviderError - A data source could not deliver data
    │   ├── MissingCredentialsError - Provider has no credentials configured
    │   ├── TransientProviderError - Retryable upstream failure (non-2xx, bad payload)
    │   ├── SubjectNotFoundError - Upstream knows nothing about the subject
    │   └── ProviderExhaustedError - All retry attempts failed
    └── ProcessorError - A scoring strategy failed
        └── LLMError - LLM request or response parsing failed

Provider and processor errors are recovered inside the core and surfaced
as data (error outcomes, lowered confidence). Only ConfigurationError is
allowed to escape to the caller.
"""


class RiskBrainError(Exception):
    """
    Base exception for all RiskBrain errors.

    Attributes:
        message: Short human-readable message
        technical_message: Detailed message for logs (optional)
    """

    def __init__(
        self,
        message: str = "Risk assessment failed.",
        technical_message: str | None = None,
    ):
        self.message = message
        self.technical_message = technical_message or message
        super().__init__(self.technical_message)

    def __str__(self) -> str:
        return self.technical_message


class ConfigurationError(RiskBrainError):
    """
    Raised when a collaborator violates its contract at registration.

    Examples:
        - Provider without a name
        - Two providers registered under the same name
        - Processor whose assess_risk is not a coroutine function
    """

    def __init__(
        self,
        message: str = "Invalid risk engine configuration.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class ProviderError(RiskBrainError):
    """Raised inside a provider when its data source cannot deliver data."""

    def __init__(
        self,
        message: str = "Data source unavailable.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class MissingCredentialsError(ProviderError):
    """Raised before any network call when required credentials are absent."""

    def __init__(
        self,
        message: str = "Data source credentials are not configured.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class TransientProviderError(ProviderError):
    """
    Raised for failures worth retrying.

    Examples:
        - HTTP 5xx or 429
        - Unexpected response structure
        - Upstream reports a temporary failure
    """


class SubjectNotFoundError(ProviderError):
    """Raised when the upstream has no data for the subject. Never retried."""

    def __init__(
        self,
        message: str = "No data found for this address.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class ProviderExhaustedError(ProviderError):
    """Raised when every retry attempt failed."""

    def __init__(
        self,
        message: str = "Data source did not respond.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class ProcessorError(RiskBrainError):
    """Raised when a risk processor cannot produce an opinion."""

    def __init__(
        self,
        message: str = "Risk processor failed.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class LLMError(ProcessorError):
    """
    Raised when the LLM request fails.

    Examples:
        - API timeout
        - Rate limiting
        - Invalid response format
    """

    def __init__(
        self,
        message: str = "LLM analysis is temporarily unavailable.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)
