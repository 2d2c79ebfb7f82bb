"""Post-render HTML rewrites.

Runs once per rendered page, after templating:

- pages with ``images_url`` get their relative ``images/...`` sources pointed
  at that base URL;
- pages using an email layout get their CSS inlined and their ``<code>``
  whitespace made visible to email clients that collapse it.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import structlog
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString
from premailer import Premailer

if TYPE_CHECKING:
    from docsnip.config import Settings

log = structlog.get_logger()

DEFAULT_DOT_COLOR = "#1a1a1a"

_BODY_RE = re.compile(r"<body\b[^>]*>(.*?)</body>", re.IGNORECASE | re.DOTALL)
_BLOCK_END_RE = re.compile(r"</(div|p)>", re.IGNORECASE)
_SPACE_RUN_RE = re.compile(r"( +)")
_IMG_SRC_RE = re.compile(r"""(<img\s[^>]*src=["'])images([^"']*)(["'])""")


class _EntityText(PreformattedString):
    """Already-escaped markup, written out unchanged by every formatter."""


def _dot_spaces(soup: BeautifulSoup, text_node: NavigableString, dot_color: str) -> None:
    """Replace each run of spaces in ``text_node`` with coloured ``&middot;`` entities."""
    replacements: list[Tag | NavigableString] = []
    # re.split with a capture group puts the space runs at odd indices
    for index, part in enumerate(_SPACE_RUN_RE.split(str(text_node))):
        if not part:
            continue
        if index % 2:
            span = soup.new_tag("span", style=f"color:{dot_color}")
            span.append(_EntityText("&middot;" * len(part)))
            replacements.append(span)
        else:
            replacements.append(NavigableString(part))
    text_node.replace_with(*replacements)


def rewrite_image_urls(html: str, images_url: str) -> str:
    """Point ``<img src="images/...">`` at ``images_url``."""
    return _IMG_SRC_RE.sub(
        lambda match: f"{match.group(1)}{images_url}{match.group(2)}{match.group(3)}",
        html,
    )


def inline_email_html(html: str, dot_color: str = DEFAULT_DOT_COLOR) -> str:
    """Make rendered HTML survive email clients.

    Inlines CSS, keeps only the body content, shows spaces inside ``<code>``
    as coloured middle dots, and adds a ``<br>`` after each div and paragraph.
    """
    inlined = Premailer(html, disable_validation=True).transform(pretty_print=False)
    match = _BODY_RE.search(inlined)
    body = match.group(1) if match else inlined

    soup = BeautifulSoup(body, "html.parser")
    for code in soup.find_all("code"):
        for text_node in code.find_all(string=True):
            # Comments and CDATA are PreformattedString too
            if isinstance(text_node, PreformattedString) or " " not in text_node:
                continue
            _dot_spaces(soup, text_node, dot_color)

    return _BLOCK_END_RE.sub(lambda m: f"</{m.group(1)}><br>", soup.decode())


def postprocess_page(html: str, page: dict[str, Any], output_ext: str, settings: Settings) -> str:
    """Apply the rewrites a page asks for. Non-HTML output is returned unchanged."""
    if output_ext != ".html":
        return html

    images_url = page.get("images_url")
    if images_url:
        html = rewrite_image_urls(html, str(images_url))

    if page.get("layout") in settings.email.layouts:
        log.debug("email_inlining", page=page.get("path"))
        html = inline_email_html(html, settings.email.dot_color)
    return html
