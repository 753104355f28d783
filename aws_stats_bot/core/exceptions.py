"""
Core exception classes for AWS Stats Bot.
"""


class StatsBotError(Exception):
    """Base exception for all AWS Stats Bot errors."""

    def __init__(self, message: str, details: str = None, stage: str = None):
        super().__init__(message)
        self.message = message
        self.details = details
        self.stage = stage

    @property
    def kind(self) -> str:
        return type(self).__name__


class ProviderUnavailable(StatsBotError):
    """Raised when an AWS client cannot be constructed."""
    pass


class FetchFailed(StatsBotError):
    """Raised when a list, describe or metric call fails."""
    pass


class ValidationFailed(StatsBotError):
    """Raised when user input is rejected before any network call."""
    pass


class ChartFailed(StatsBotError):
    """Raised when the chart service does not return a usable URL."""
    pass


class ConfigurationError(StatsBotError):
    """Raised when configuration is invalid or missing."""
    pass
