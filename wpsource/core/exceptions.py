"""
Core exception hierarchy for wpsource.

Fatal errors (configuration, transport, unexpected status, malformed payload)
propagate out of an ingestion run. Soft access errors never become exceptions;
the client logs them and substitutes a fallback payload.
"""

from typing import Any, Optional


# =============================================================================
# Base Exceptions
# =============================================================================


class WordPressSourceError(Exception):
    """Base exception for all wpsource errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class PermanentError(WordPressSourceError):
    """
    Errors that abort the ingestion run.

    Examples: Invalid configuration, unreachable API, unexpected HTTP status.
    """

    pass


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(PermanentError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        details = {"config_key": config_key} if config_key else None
        super().__init__(message, details)


# =============================================================================
# Fetch Errors
# =============================================================================


class FetchError(PermanentError):
    """Raised when a resource cannot be fetched from the REST API."""

    def __init__(
        self,
        path: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.path = path
        super().__init__(message, details)


class HTTPStatusError(FetchError):
    """Raised when the API answers with an unsuccessful, non-soft status."""

    def __init__(self, path: str, status_code: int, url: str):
        self.status_code = status_code
        super().__init__(
            path,
            f"{status_code} - {url}",
            {"status_code": status_code, "url": url},
        )


class MalformedPayloadError(FetchError):
    """Raised when a successful response does not carry a JSON object or array."""

    pass


# =============================================================================
# Media Errors
# =============================================================================


class MediaDownloadError(WordPressSourceError):
    """Raised when a remote asset cannot be written to local storage."""

    def __init__(
        self,
        url: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        self.url = url
        super().__init__(message, details)
