"""Tag handler for include_file.

Receives the raw tag markup, the page's RenderContext and the shared
SiteState, orchestrates markup parsing / source loading / text transforms,
and returns the text to splice into the page. No Jinja2 extension imports here:
tags.py handles the template wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from docsnip.errors import DocsnipError
from docsnip.markup import parse_markup, render_markup
from docsnip.sources import load_source
from docsnip.transform import apply_pipeline

if TYPE_CHECKING:
    from collections.abc import Mapping

    from jinja2 import Environment

    from docsnip.state import RenderContext, SiteState


async def include_file(
    raw_markup: str,
    ctx: RenderContext,
    state: SiteState,
    variables: Mapping[str, Any] | None = None,
    environment: Environment | None = None,
) -> str:
    """Render one ``include_file`` tag.

    Expected failures never escape: they are logged at error level and the
    tag renders as ``ERROR: <message> in <page path>`` so the rest of the
    page and the rest of the site keep rendering.
    """
    log = structlog.get_logger().bind(tag="include_file", page=ctx.page_path)
    log.debug("tag_called", markup=raw_markup)

    try:
        markup = await render_markup(raw_markup, variables, environment)
        request = parse_markup(markup, raw_markup)
        text = await load_source(request, ctx, state)
        return apply_pipeline(text, request, ctx.lang, source=request.source.describe())
    except DocsnipError as exc:
        log.error("include_failed", code=exc.code, message=exc.message)
        return exc.render(ctx.page_path)
