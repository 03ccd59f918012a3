"""HTTP attachment downloader."""

from __future__ import annotations

from typing import Optional

import httpx

from discordreaper.application.ports.downloader import DownloadedFile, Downloader
from discordreaper.application.ports.errors import DownloadError


class HttpxDownloader(Downloader):
    """Fetch whole attachment bodies into memory.

    The underlying httpx.Client is shared by every worker thread; httpx clients
    are safe for concurrent use.
    """

    def __init__(self, client: Optional[httpx.Client] = None, timeout_seconds: Optional[float] = None) -> None:
        self._client = client or httpx.Client(timeout=timeout_seconds, follow_redirects=True)

    def fetch(self, url: str) -> DownloadedFile:
        try:
            response = self._client.get(url)
        # InvalidURL is raised while building the request and is not an HTTPError
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise DownloadError(f"error downloading file from {url}: {e}") from e

        return DownloadedFile(
            status_code=response.status_code,
            content_type=response.headers.get("Content-Type", ""),
            content=response.content,
        )

    def close(self) -> None:
        self._client.close()
