"""
Configuration Management.

Configuration sources (in order of precedence):
1. Keyword arguments passed to load_settings()
2. Environment variables (WORDPRESS_ prefix)
3. .env file
4. Default values

Example:
    from wpsource.config import load_settings

    settings = load_settings(base_url="https://example.com", languages=["de"])
"""

from wpsource.config.settings import (
    DEFAULT_ROUTES,
    CustomEndpoint,
    SourceSettings,
    load_settings,
)

__all__ = [
    "DEFAULT_ROUTES",
    "CustomEndpoint",
    "SourceSettings",
    "load_settings",
]
