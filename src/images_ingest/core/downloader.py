"""Source image download over HTTP."""

from typing import NamedTuple

import httpx

from .exceptions import DownloadError

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class DownloadedImage(NamedTuple):
    content: bytes
    content_type: str


class ImageDownloader:
    """Fetches source photos, possibly cross-origin, with a bounded timeout."""

    def __init__(self, http_client: httpx.AsyncClient, timeout: float = 30.0):
        self._http = http_client
        self._timeout = timeout

    async def download(self, url: str) -> DownloadedImage:
        """
        Download ``url`` fully into memory.

        Raises:
            DownloadError: On transport failure, timeout or a non-2xx status
        """
        try:
            response = await self._http.get(url, timeout=self._timeout, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise DownloadError(f"Download of {url} failed: {exc}") from exc

        if not response.is_success:
            raise DownloadError(f"Download failed with status {response.status_code}")

        content_type = response.headers.get("content-type") or DEFAULT_CONTENT_TYPE
        return DownloadedImage(response.content, content_type)
