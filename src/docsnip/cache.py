"""In-memory TTL cache for fetched remote files.

One instance is created per site build and injected into the Fetcher. Entries
expire independently ``ttl_seconds`` after they were written and are replaced
transparently on the next request. There is no invalidation API; entries
only disappear through expiry or ``clear()``.

``get_or_fetch`` is single-flight: when several page renders ask for the same
URL at once, only the first one runs the loader and the others await its
result. A failed load is never cached; every waiter receives the exception.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

import structlog

from docsnip.config import DEFAULT_CACHE_TTL_SECONDS
from docsnip.models.cache import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

log = structlog.get_logger()


class TTLCache:
    """Process-local cache implementing CacheProtocol."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._in_flight: dict[str, asyncio.Future[str]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> str | None:
        """Return the cached value, or ``None`` when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: str, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS) -> None:
        now = self._clock()
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            stored_at=now,
            expires_at=now + ttl_seconds,
        )

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_fetch(
        self,
        key: str,
        loader: Callable[[], Awaitable[str]],
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
    ) -> str:
        """Return the cached value for ``key``, running ``loader`` on a miss."""
        cached = self.get(key)
        if cached is not None:
            log.debug("cache_hit", key=key)
            return cached

        pending = self._in_flight.get(key)
        if pending is not None:
            log.debug("cache_wait_in_flight", key=key)
            return await asyncio.shield(pending)

        log.debug("cache_miss", key=key)
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            value = await loader()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unawaited failure does not warn at GC time
            future.exception()
            raise
        else:
            self.set(key, value, ttl_seconds)
            future.set_result(value)
            return value
        finally:
            del self._in_flight[key]
