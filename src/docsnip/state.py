"""Render state containers.

SiteState is created once per build and shared by every page render.
RenderContext is created per page and passed explicitly to the parser,
fetcher and transform steps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx

    from docsnip.config import Settings
    from docsnip.protocols import CacheProtocol, FetcherProtocol


@dataclass
class SiteState:
    """Holds the shared collaborators for one site build."""

    settings: Settings
    http_client: httpx.AsyncClient | None = None
    cache: CacheProtocol | None = None
    fetcher: FetcherProtocol | None = None


@dataclass(frozen=True)
class RenderContext:
    """What an include tag needs to know about the page it sits in."""

    source_root: Path
    page_path: str
    lang: str | None = None
    page: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_page(cls, page: dict[str, Any], settings: Settings) -> RenderContext:
        return cls(
            source_root=settings.source_root,
            page_path=str(page.get("path", "")),
            lang=page.get("lang") or settings.site.lang,
            page=page,
        )
