"""Jinja2 extensions registering the site's custom tags.

    {% include_file "<path>" [snippet="name"] [syntax="lang"] [indent="N"] %}
    {% embedded id="<id>" url="<url>" node="<selector>" %}
    {% warn "<message>" %}

The extensions need an environment created with ``enable_async=True`` and a
SiteState assigned to ``environment.docsnip_state`` (see renderer.py).
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING

import structlog
from jinja2 import nodes
from jinja2.ext import Extension
from markupsafe import Markup

from docsnip.includer import include_file
from docsnip.state import RenderContext

if TYPE_CHECKING:
    from jinja2 import Environment
    from jinja2.parser import Parser
    from jinja2.runtime import Context

    from docsnip.state import SiteState

log = structlog.get_logger()

EMBEDDED_ATTRIBUTES = ("id", "url", "node")


def _site_state(environment: Environment) -> SiteState:
    state = environment.docsnip_state  # type: ignore[attr-defined]
    if state is None:
        raise RuntimeError("environment.docsnip_state is not set")
    return state


def _page_path(context: Context) -> str:
    page = context.get("page") or {}
    return str(page.get("path", ""))


class IncludeFileExtension(Extension):
    """``include_file``: splice a (part of a) local or remote file into the page.

    The tag body is free-form markup rather than Jinja2 expressions, so a
    preprocessing pass turns it into a single string literal before the
    template is lexed. The includer renders any ``{{ ... }}`` inside it with
    the page's variables.
    """

    tags = {"include_file"}

    # Raw blocks are matched first and left as they are
    _TAG_RE = re.compile(
        r"(?P<raw>\{%-?\s*raw\s*-?%\}.*?\{%-?\s*endraw\s*-?%\})"
        r"|(?P<open>\{%-?\s*include_file)\s+(?P<markup>.*?)\s*(?P<close>-?%\})",
        re.DOTALL,
    )

    def __init__(self, environment: Environment) -> None:
        super().__init__(environment)
        environment.extend(docsnip_state=None)

    def preprocess(self, source: str, name: str | None, filename: str | None = None) -> str:
        return self._TAG_RE.sub(self._quote_markup, source)

    @staticmethod
    def _quote_markup(match: re.Match[str]) -> str:
        if match.group("raw"):
            return match.group("raw")
        # JSON string escapes are a subset of what the Jinja2 lexer accepts
        markup = json.dumps(match.group("markup"))
        return f"{match.group('open')} {markup} {match.group('close')}"

    def parse(self, parser: Parser) -> nodes.Node:
        lineno = next(parser.stream).lineno
        markup = parser.parse_expression()
        call = self.call_method(
            "_render",
            [markup, nodes.ContextReference()],
            lineno=lineno,
        )
        return nodes.Output([call], lineno=lineno)

    async def _render(self, raw_markup: str, context: Context) -> str:
        state = _site_state(self.environment)
        ctx = RenderContext.for_page(context.get("page") or {}, state.settings)
        return await include_file(
            raw_markup,
            ctx,
            state,
            variables=context.get_all(),
            environment=self.environment,
        )


def render_embedded(element_id: str, url: str, node: str) -> Markup:
    """Placeholder div plus a jQuery partial load of ``url``'s ``node`` and tab setup."""
    output = f'<div id="{element_id}"></div>'
    output += "<script>"
    output += f"$('#{element_id}').load('{url} #{node}', "
    output += "    function(data) {"
    output += f"        $('#{element_id} .tabGroup').tabs();"
    output += "    } );"
    output += " </script> "
    return Markup(output)


class EmbeddedExtension(Extension):
    """``embedded``: load a fragment of another page into a tab widget."""

    tags = {"embedded"}

    def parse(self, parser: Parser) -> nodes.Node:
        token = next(parser.stream)
        attributes: dict[str, nodes.Expr] = {}
        while parser.stream.current.type != "block_end":
            key = parser.stream.expect("name")
            parser.stream.expect("assign")
            attributes[key.value] = parser.parse_expression()
            parser.stream.skip_if("comma")

        missing = [name for name in EMBEDDED_ATTRIBUTES if name not in attributes]
        if missing:
            parser.fail(
                f"embedded tag is missing required attribute(s): {', '.join(missing)}",
                token.lineno,
            )

        call = self.call_method(
            "_render",
            [attributes[name] for name in EMBEDDED_ATTRIBUTES],
            lineno=token.lineno,
        )
        return nodes.Output([call], lineno=token.lineno)

    def _render(self, element_id: str, url: str, node: str) -> Markup:
        return render_embedded(element_id, url, node)


class WarnExtension(Extension):
    """``warn``: log a build-time warning for the current page; renders nothing."""

    tags = {"warn"}

    def parse(self, parser: Parser) -> nodes.Node:
        lineno = next(parser.stream).lineno
        message = parser.parse_expression()
        call = self.call_method("_warn", [message, nodes.ContextReference()], lineno=lineno)
        return nodes.Output([call], lineno=lineno)

    def _warn(self, message: str, context: Context) -> str:
        log.warning("template_warning", page=_page_path(context), message=str(message).strip())
        return ""
