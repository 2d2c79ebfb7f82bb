"""Integration test fixtures.

Provides a fully wired SiteState (real httpx client, in-memory TTL cache,
fetcher) over the sample site from tests/conftest.py. HTTP is mocked per test
with respx.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from docsnip.cache import TTLCache
from docsnip.fetcher import Fetcher
from docsnip.state import SiteState

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from docsnip.config import Settings
    from tests.conftest import FakeClock


@pytest.fixture()
async def site_state(settings: Settings, clock: FakeClock) -> AsyncGenerator[SiteState, None]:
    """SiteState wired for integration tests, driven by the fake clock."""
    cache = TTLCache(clock=clock)
    async with httpx.AsyncClient() as client:
        fetcher = Fetcher(client, cache, ttl_seconds=settings.cache.ttl_seconds)
        yield SiteState(
            settings=settings,
            http_client=client,
            cache=cache,
            fetcher=fetcher,
        )
