"""
Core infrastructure modules for wpsource.

Provides the exception hierarchy shared by the client, downloader and
orchestrator.
"""

from wpsource.core.exceptions import (
    WordPressSourceError,
    PermanentError,
    ConfigurationError,
    FetchError,
    HTTPStatusError,
    MalformedPayloadError,
    MediaDownloadError,
)

__all__ = [
    "WordPressSourceError",
    "PermanentError",
    "ConfigurationError",
    "FetchError",
    "HTTPStatusError",
    "MalformedPayloadError",
    "MediaDownloadError",
]
