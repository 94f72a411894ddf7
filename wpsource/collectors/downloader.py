"""Media downloader for remote WordPress assets.

Assets are streamed into a private staging directory and moved onto their
final path only once the stream completed, so a reader never sees a partially
written file. An existing destination is never downloaded again.
"""

import asyncio
import itertools
import os
from functools import partial
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import httpx
import structlog

from wpsource.core.exceptions import MediaDownloadError

logger = structlog.get_logger(__name__)

# Characters left untouched by JavaScript's encodeURI
URI_SAFE_CHARACTERS = ";,/?:@&=+$-_.!~*'()#"


def encode_uri(url: str) -> str:
    """Percent-encode a URL, keeping its reserved characters intact."""
    return quote(url, safe=URI_SAFE_CHARACTERS)


class MediaDownloader:
    """Idempotent, atomic downloader for remote media.

    Downloads started with schedule() run in the background. Call wait_all()
    before treating an ingestion as complete.

    Example:
        async with MediaDownloader("wp-images", ".temp/downloads") as downloader:
            path = downloader.schedule("https://example.com/a.jpg", "a.jpg")
            failures = await downloader.wait_all()
    """

    def __init__(
        self,
        download_dir: Path | str,
        staging_dir: Path | str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the downloader and create its directories.

        Args:
            download_dir: Directory holding finished assets.
            staging_dir: Private directory for in-flight downloads.
            timeout: Request timeout in seconds. None disables timeouts.
            transport: Optional httpx transport, used by tests.
        """
        self.download_dir = Path(download_dir).resolve()
        self.staging_dir = Path(staging_dir).resolve()
        self.download_dir.mkdir(parents=True, exist_ok=True)
        self.staging_dir.mkdir(parents=True, exist_ok=True)

        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        # Temp file names, unique for the lifetime of this instance
        self._counter = itertools.count(1)

        self._tasks: set[asyncio.Task] = set()
        self._in_flight: dict[Path, asyncio.Task] = {}
        self._failures: list[BaseException] = []

    async def __aenter__(self) -> "MediaDownloader":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def pending(self) -> int:
        """Number of scheduled downloads not yet collected by wait_all()."""
        return len(self._tasks)

    def local_path(self, file_name: str, dest_dir: Path | str | None = None) -> Path:
        """Resolve the final path of an asset."""
        return (Path(dest_dir) if dest_dir is not None else self.download_dir).resolve() / file_name

    async def download(
        self,
        url: str,
        file_name: str,
        dest_dir: Path | str | None = None,
    ) -> Path:
        """Download an asset unless its destination already exists.

        Args:
            url: Remote asset URL.
            file_name: File name inside the destination directory.
            dest_dir: Destination directory, defaults to download_dir.

        Returns:
            Path of the local asset.

        Raises:
            MediaDownloadError: On transport, status or write failures.
        """
        if not file_name:
            raise MediaDownloadError(url, f"No file name for {url}", {"file_name": file_name})

        destination = self.local_path(file_name, dest_dir)
        if destination.exists():
            return destination

        temp_path = self.staging_dir / f"{next(self._counter)}.tmp"
        encoded_url = encode_uri(url)
        client = self._ensure_client()
        loop = asyncio.get_running_loop()

        logger.info("downloading_media", url=encoded_url, file_name=file_name)
        try:
            async with client.stream("GET", encoded_url) as response:
                response.raise_for_status()
                await self._write_stream(response, temp_path)
            await loop.run_in_executor(None, os.replace, temp_path, destination)
        except (httpx.HTTPError, OSError) as e:
            temp_path.unlink(missing_ok=True)
            raise MediaDownloadError(
                url,
                f"Failed to download {url}: {e}",
                {"file_name": file_name, "error_type": type(e).__name__},
            ) from e
        return destination

    async def _write_stream(self, response: httpx.Response, temp_path: Path) -> None:
        """Write a streamed body to the staging file off the event loop."""
        loop = asyncio.get_running_loop()
        handle = await loop.run_in_executor(None, temp_path.open, "wb")
        try:
            async for chunk in response.aiter_bytes():
                await loop.run_in_executor(None, handle.write, chunk)
        finally:
            await loop.run_in_executor(None, handle.close)

    def schedule(self, url: str, file_name: str) -> Path:
        """Start a background download and return its destination path.

        A destination that is already being downloaded shares the running task.
        Must be called with a running event loop.
        """
        destination = self.local_path(file_name)
        if destination not in self._in_flight:
            task = asyncio.create_task(self.download(url, file_name))
            self._in_flight[destination] = task
            self._tasks.add(task)
            task.add_done_callback(partial(self._on_done, url, destination))
        return destination

    def _on_done(self, url: str, destination: Path, task: asyncio.Task) -> None:
        self._in_flight.pop(destination, None)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                "media_download_failed",
                url=url,
                destination=str(destination),
                error=str(exc),
            )
            self._failures.append(exc)

    async def wait_all(self) -> list[BaseException]:
        """Wait for every scheduled download.

        Returns:
            Errors raised by failed downloads since the last call.
        """
        while self._tasks:
            tasks = list(self._tasks)
            self._tasks.clear()
            await asyncio.gather(*tasks, return_exceptions=True)

        failures, self._failures = self._failures, []
        return failures
