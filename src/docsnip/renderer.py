"""Page rendering.

Responsibilities (and nothing more):
- Own the shared collaborators (HTTP client, cache, fetcher) for one build
- Build the async Jinja2 environment with the custom tags
- Merge front-matter defaults, render a page, post-process its HTML
"""

from __future__ import annotations

import asyncio
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
import yaml
from jinja2 import Environment

from docsnip.cache import TTLCache
from docsnip.fetcher import Fetcher, build_http_client
from docsnip.postprocess import postprocess_page
from docsnip.state import SiteState
from docsnip.tags import EmbeddedExtension, IncludeFileExtension, WarnExtension

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Iterable

    from docsnip.config import Settings

log = structlog.get_logger()

HTML_SUFFIXES = frozenset({".html", ".htm"})

_FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


@dataclass
class RenderedPage:
    path: str
    output: str
    output_ext: str
    page: dict[str, Any]


@asynccontextmanager
async def open_site(settings: Settings) -> AsyncGenerator[SiteState, None]:
    """Create and tear down the shared resources for one build."""
    http_client = build_http_client(settings.fetcher)
    cache = TTLCache()
    fetcher = Fetcher(http_client, cache, ttl_seconds=settings.cache.ttl_seconds)
    state = SiteState(
        settings=settings,
        http_client=http_client,
        cache=cache,
        fetcher=fetcher,
    )
    log.info("site_opened", source=str(settings.source_root))
    try:
        yield state
    finally:
        await http_client.aclose()
        log.info("site_closed", cached_urls=len(cache))


def build_environment(state: SiteState) -> Environment:
    environment = Environment(
        enable_async=True,
        keep_trailing_newline=True,
        extensions=[IncludeFileExtension, EmbeddedExtension, WarnExtension],
    )
    environment.docsnip_state = state  # type: ignore[attr-defined]
    return environment


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Return ``(front_matter, body)``. Pages without front matter get ``{}``."""
    match = _FRONT_MATTER_RE.match(text)
    if match is None:
        return {}, text
    data = yaml.safe_load(match.group(1)) or {}
    if not isinstance(data, dict):
        raise ValueError("Front matter must be a YAML mapping")
    return data, text[match.end() :]


async def render_page(
    path: str | Path,
    state: SiteState,
    environment: Environment | None = None,
) -> RenderedPage:
    """Render one source file, relative to the site source root."""
    settings = state.settings
    source_root = settings.source_root
    abs_path = (source_root / path).resolve()
    rel_path = abs_path.relative_to(source_root).as_posix()

    text = abs_path.read_text(encoding=settings.site.encoding)
    front_matter, body = split_front_matter(text)

    page: dict[str, Any] = {**settings.site.page_defaults(rel_path), **front_matter}
    page["path"] = rel_path
    output_ext = ".html" if abs_path.suffix.lower() in HTML_SUFFIXES else abs_path.suffix

    environment = environment or build_environment(state)
    template = environment.from_string(body)
    output = await template.render_async(page=page, site=settings.site.model_dump())
    output = postprocess_page(output, page, output_ext, settings)

    log.info("page_rendered", page=rel_path, output_ext=output_ext, length=len(output))
    return RenderedPage(path=rel_path, output=output, output_ext=output_ext, page=page)


async def render_site(paths: Iterable[str | Path], state: SiteState) -> list[RenderedPage]:
    """Render pages concurrently; the shared cache fetches each URL once."""
    environment = build_environment(state)
    return list(
        await asyncio.gather(*(render_page(path, state, environment) for path in paths))
    )
