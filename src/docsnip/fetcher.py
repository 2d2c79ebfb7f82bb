"""HTTP fetcher for remote include sources.

All network I/O for ``include_file`` goes through a single Fetcher instance
shared across page renders. The Fetcher receives an httpx.AsyncClient and a
cache via constructor injection; the build owns both lifecycles.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog

from docsnip.config import DEFAULT_CACHE_TTL_SECONDS
from docsnip.errors import DocsnipError, ErrorCode

if TYPE_CHECKING:
    from docsnip.config import FetcherSettings
    from docsnip.protocols import CacheProtocol

log = structlog.get_logger()

GITHUB_WEB_BASE = "https://github.com/"
GITHUB_RAW_BASE = "https://raw.githubusercontent.com/"


def build_http_client(settings: FetcherSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once per build."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent},
    )


def convert_github_url_to_raw(url: str) -> str:
    """Turn a browsable GitHub link into its raw-content URL.

    ``https://github.com/o/r/tree/main/a.cs`` → ``https://raw.githubusercontent.com/o/r/main/a.cs``.
    Any other URL is returned unchanged.
    """
    if not url.startswith(GITHUB_WEB_BASE):
        return url
    return url.replace(GITHUB_WEB_BASE, GITHUB_RAW_BASE, 1).replace("/tree/", "/", 1)


class Fetcher:
    """Cached HTTP GET for remote files."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: CacheProtocol,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
    ) -> None:
        self._client = client
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    async def fetch(self, url: str) -> str:
        """Return the body of ``url``, served from cache within the TTL window.

        Raises DocsnipError on network errors and non-2xx responses.
        """
        return await self._cache.get_or_fetch(url, lambda: self._get(url), self._ttl_seconds)

    async def _get(self, url: str) -> str:
        try:
            response = await self._client.get(url)
        # InvalidURL and IDNA errors (ValueError) come from URL parsing, before any I/O
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise DocsnipError(
                code=ErrorCode.FETCH_FAILED,
                message=f"An error occurred while fetching the file '{url}': {exc}",
            ) from exc

        if not response.is_success:
            raise DocsnipError(
                code=ErrorCode.FETCH_FAILED,
                message=(
                    f"An error occurred while fetching the file '{url}': "
                    f"HTTP {response.status_code}"
                ),
            )

        # httpx decodes with errors="replace", so this never raises
        text = response.text
        log.info(
            "fetch_complete",
            url=url,
            status_code=response.status_code,
            content_length=len(text),
        )
        return text
