"""Protocol interfaces for swappable components.

The includer and SiteState reference these protocols, not the concrete
implementations. This allows:
- Tests to use lightweight fakes that count network calls
- A shared cache (e.g. for a parallel build) to be swapped in without
  changing the fetcher
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class CacheProtocol(Protocol):
    """Interface for the fetched-content cache."""

    async def get_or_fetch(
        self,
        key: str,
        loader: Callable[[], Awaitable[str]],
        ttl_seconds: float,
    ) -> str: ...


class FetcherProtocol(Protocol):
    """Interface for the remote file fetcher."""

    async def fetch(self, url: str) -> str: ...
