"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class VinylVaultError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(VinylVaultError):
    """Raised for issues related to configuration loading or validation."""


class InvalidRequestError(VinylVaultError):
    """Raised when an operation is called with missing or malformed arguments."""


class DiscogsAPIError(VinylVaultError):
    """Raised when the Discogs API answers with a non-success status."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class AuthenticationError(DiscogsAPIError):
    """Raised when Discogs rejects the personal access token."""


class NotFoundError(DiscogsAPIError):
    """Raised when the requested release, master or artist does not exist."""


class RateLimitError(DiscogsAPIError):
    """Raised when Discogs answers 429 "Too Many Requests"."""
