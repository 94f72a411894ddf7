"""
Pytest Configuration and Shared Fixtures.

This module provides common fixtures for all tests:

- mock_api: factory for an httpx.MockTransport serving canned WordPress responses
- make_settings: factory for validated settings writing media under tmp_path
- sample_post: a post as returned by wp/v2/posts?_embed
"""

import re
from typing import Any

import httpx
import pytest

from wpsource.config import load_settings

_LOCALE_PREFIX = re.compile(r"^/[a-z]{2}(?=/wp-json/)")


class MockWordPressAPI:
    """Serves canned responses keyed by URL path and records every request.

    Route values:
        int: error status with a WordPress error body
        bytes: binary body (media)
        str: text/html body
        anything else: JSON body

    Localized paths such as /de/wp-json/... fall back to the unprefixed route.
    """

    def __init__(self, routes: dict[str, Any]):
        self.routes = routes
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path not in self.routes:
            path = _LOCALE_PREFIX.sub("", path)
        if path not in self.routes:
            return httpx.Response(404, json={"code": "rest_no_route", "data": {"status": 404}})

        payload = self.routes[path]
        if isinstance(payload, int):
            return httpx.Response(payload, json={"code": "rest_error", "data": {"status": payload}})
        if isinstance(payload, bytes):
            return httpx.Response(200, content=payload, headers={"Content-Type": "image/jpeg"})
        if isinstance(payload, str):
            return httpx.Response(200, text=payload, headers={"Content-Type": "text/html"})
        return httpx.Response(200, json=payload)

    @property
    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def mock_api():
    """Return the MockWordPressAPI factory."""
    return MockWordPressAPI


@pytest.fixture
def make_settings(tmp_path):
    """Return a settings factory storing media under tmp_path."""

    def factory(**overrides):
        options = {
            "base_url": "https://example.com",
            "download_dir": tmp_path / "wp-images",
            "staging_dir": tmp_path / ".temp" / "downloads",
        }
        options.update(overrides)
        return load_settings(**options)

    return factory


@pytest.fixture
def sample_post() -> dict:
    """Return a sample embedded post for testing."""
    return {
        "id": 10,
        "slug": "hello-world",
        "type": "post",
        "author": 1,
        "featured_media": 5,
        "categories": [3],
        "tags": [7],
        "title": {"rendered": "Hello World"},
        "content": {
            "rendered": '<p>Intro</p><img src="https://media.example.com/uploads/inline.png" alt="Inline">',
            "protected": False,
        },
        "acf": {
            "hero": {
                "ID": 5,
                "type": "image",
                "filename": "hero.jpg",
                "url": "https://media.example.com/uploads/hero.jpg",
                "title": "Hero",
                "description": "Hero description",
            },
        },
        "_links": {"self": [{"href": "https://example.com/wp-json/wp/v2/posts/10"}]},
        "_embedded": {
            "wp:featuredmedia": [
                {"id": 5, "source_url": "https://media.example.com/uploads/featured.jpg"},
            ],
        },
    }
