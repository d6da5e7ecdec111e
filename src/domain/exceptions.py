"""
Domain exceptions - Semantic error types for verification.

Validation and state failures are reported as outcome enums, not exceptions.
The types below cover the conditions a caller cannot recover from by
re-submitting a request: missing server configuration in particular.
"""


class VerificationError(Exception):
    """Base class for verification domain errors."""

    pass


class ConfigurationError(VerificationError):
    """A required server-side setting is missing or unusable."""

    pass


class ProviderConfigurationError(ConfigurationError):
    """An email provider was used without its host or credentials."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
