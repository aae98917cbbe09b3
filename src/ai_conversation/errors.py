"""
Error types raised by the conversation engine and its collaborators.
"""


class ConversationError(Exception):
    """Base class for all conversation errors."""


class ApiCallFailed(ConversationError):
    """A remote API call failed or its stream broke before completion."""

    REASONS = ("auth", "status", "timeout", "transport", "stream")

    def __init__(self, reason: str, message: str = ""):
        """
        Initialize the error.

        Args:
            reason: Failure classification (auth, status, timeout, transport, stream)
            message: Human readable detail
        """
        self.reason = reason
        self.message = message
        super().__init__(f"API call failed ({reason}): {message}" if message else f"API call failed ({reason})")


class ConfigurationInvalid(ConversationError):
    """Configuration is missing or out of bounds. Raised before any turn runs."""

    def __init__(self, field: str, message: str = ""):
        self.field = field
        self.message = message
        super().__init__(f"Invalid configuration for '{field}': {message}" if message else f"Invalid configuration for '{field}'")


class CancellationRequested(ConversationError):
    """The conversation run was cancelled between turns."""
