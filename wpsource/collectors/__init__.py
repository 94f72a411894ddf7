"""
Data Source Integrations.

This module contains the pieces that talk to a WordPress site:

- client: REST API client with locale fan-out
- downloader: atomic, idempotent media downloader
- normalization: payload to node-field rewriting

Example:
    from wpsource.collectors import WordPressClient

    async with WordPressClient("https://example.com") as client:
        result = await client.fetch_paged("wp/v2/posts")
"""

from wpsource.collectors.client import FetchResult, LocalizedPayload, WordPressClient
from wpsource.collectors.downloader import MediaDownloader

__all__ = [
    "FetchResult",
    "LocalizedPayload",
    "MediaDownloader",
    "WordPressClient",
]
