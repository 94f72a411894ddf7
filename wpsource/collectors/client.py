"""WordPress REST API client with locale fan-out.

Every logical request is issued against the default endpoint and then, one by
one, against each configured language endpoint using the same path and query
parameters.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
import structlog

from wpsource.config.settings import SourceSettings
from wpsource.core.exceptions import FetchError, HTTPStatusError, MalformedPayloadError

logger = structlog.get_logger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Treated as "no data available" rather than a failure
SOFT_ERROR_STATUSES = frozenset({401, 403})

PAYLOAD_PREVIEW_LENGTH = 150


# =============================================================================
# Results
# =============================================================================


@dataclass
class LocalizedPayload:
    """Decoded payload fetched from one language endpoint."""

    language_code: str
    data: Any


@dataclass
class FetchResult:
    """Default-locale payload plus one payload per language variant."""

    data: Any
    variants: list[LocalizedPayload] = field(default_factory=list)


# =============================================================================
# WordPress Client
# =============================================================================


class WordPressClient:
    """Async client for the WordPress REST API.

    Example:
        async with WordPressClient("https://example.com", languages=["de"]) as client:
            result = await client.fetch_paged("wp/v2/posts")
            posts = result.data
            german_posts = result.variants[0].data
    """

    def __init__(
        self,
        base_url: str,
        api_base: str = "wp-json",
        languages: Optional[list[str]] = None,
        per_page: int = 100,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Site URL, e.g. "https://example.com".
            api_base: REST API prefix appended to every endpoint.
            languages: Locale codes fetched in addition to the default locale.
            per_page: Page size injected by fetch_paged().
            timeout: Request timeout in seconds. None disables timeouts.
            transport: Optional httpx transport, used by tests.
        """
        base_url = base_url.rstrip("/")
        self._default_base = f"{base_url}/{api_base}"
        self._language_bases = [
            (code, f"{base_url}/{code}/{api_base}") for code in (languages or [])
        ]
        self._per_page = per_page
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._language_clients: list[tuple[str, httpx.AsyncClient]] = []

    @classmethod
    def from_settings(
        cls,
        settings: SourceSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "WordPressClient":
        """Build a client from validated settings."""
        return cls(
            settings.base_url,
            api_base=settings.api_base,
            languages=settings.languages,
            per_page=settings.per_page,
            timeout=settings.request_timeout,
            transport=transport,
        )

    @property
    def localized(self) -> bool:
        """Check if language variants are fetched."""
        return bool(self._language_bases)

    async def __aenter__(self) -> "WordPressClient":
        """Enter async context manager."""
        self._ensure_clients()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.aclose()

    def _build_client(self, base_url: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(self._timeout),
            headers={"Accept": "application/json"},
            follow_redirects=True,
            transport=self._transport,
        )

    def _ensure_clients(self) -> httpx.AsyncClient:
        """Ensure HTTP clients are initialized."""
        if self._client is None:
            self._client = self._build_client(self._default_base)
            self._language_clients = [
                (code, self._build_client(base)) for code, base in self._language_bases
            ]
        return self._client

    async def aclose(self) -> None:
        """Close every underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        for _, client in self._language_clients:
            await client.aclose()
        self._language_clients = []

    async def _request(
        self,
        client: httpx.AsyncClient,
        path: str,
        params: dict[str, Any],
        fallback: Any,
    ) -> Any:
        """Issue a single GET and decode its JSON body.

        Returns:
            Decoded payload, or the fallback on a soft access error.

        Raises:
            FetchError: When no response was received.
            HTTPStatusError: On any unsuccessful status other than 401/403.
            MalformedPayloadError: When a successful response is not a JSON object or array.
        """
        try:
            response = await client.get(path, params=params)
        except httpx.RequestError as e:
            url = str(client.base_url.join(path.lstrip("/")))
            code = type(e).__name__
            logger.error("wordpress_request_error", path=path, url=url, error=str(e))
            raise FetchError(
                path,
                f"{code} - {url}",
                {"code": code, "url": url, "original_error": str(e)},
            ) from e

        url = str(response.request.url)
        if response.status_code in SOFT_ERROR_STATUSES:
            logger.warning(
                "wordpress_access_denied",
                status_code=response.status_code,
                url=url,
            )
            return fallback
        if not response.is_success:
            logger.error("wordpress_api_error", status_code=response.status_code, url=url)
            raise HTTPStatusError(path, response.status_code, url)

        try:
            data = response.json()
        except ValueError as e:
            raise self._malformed(path, url, response) from e

        if not isinstance(data, (dict, list)):
            raise self._malformed(path, url, response)
        return data

    @staticmethod
    def _malformed(path: str, url: str, response: httpx.Response) -> MalformedPayloadError:
        preview = response.text.strip()[:PAYLOAD_PREVIEW_LENGTH]
        return MalformedPayloadError(
            path,
            f"Failed to fetch {url}\n"
            f"Expected JSON response but received:\n"
            f"{preview}...\n",
            {"url": url},
        )

    async def fetch(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        fallback: Any = None,
    ) -> FetchResult:
        """Fetch a resource from the default endpoint and every language endpoint.

        Args:
            path: Resource path relative to the API base, e.g. "wp/v2/types".
            params: Query parameters sent to every endpoint.
            fallback: Payload substituted on 401/403. Defaults to an empty list.

        Returns:
            FetchResult with the default payload and one variant per language.
        """
        if fallback is None:
            fallback = []
        params = dict(params or {})
        client = self._ensure_clients()

        logger.debug("fetching_resource", path=path, params=params)
        data = await self._request(client, path, params, fallback)

        variants = []
        for code, language_client in self._language_clients:
            variant_data = await self._request(language_client, path, params, fallback)
            variants.append(LocalizedPayload(language_code=code, data=variant_data))

        return FetchResult(data=data, variants=variants)

    async def fetch_paged(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
    ) -> FetchResult:
        """Fetch the first page of a collection resource.

        Only one page is requested; later pages are never followed.
        """
        return await self.fetch(path, {**(params or {}), "per_page": self._per_page})
