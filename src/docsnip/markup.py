"""Parser for ``include_file`` tag markup.

Markup has the shape ``<path> [name="value"]*``, for example::

    "snippets/Demo.cs" snippet="demo" syntax="csharp" indent="4"

The markup may itself contain template expressions (``{{ page.dir }}``); they
are rendered with the page's variables before parsing. Authors can keep an
expression literal by escaping its opening braces as ``\\{\\{`` or ``\\{\\%``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import structlog
from jinja2 import Environment, TemplateError

from docsnip.errors import DocsnipError, ErrorCode
from docsnip.models.request import FileUrl, InclusionRequest, LocalPath, RemoteUrl

if TYPE_CHECKING:
    from collections.abc import Mapping

log = structlog.get_logger()

_MARKUP_RE = re.compile(r'"?(?P<path>[^\s"]+)"?(?P<params>(?:\s+\w+="[^"]+")*)')
_PARAM_RE = re.compile(r'(?P<name>\w+)="(?P<value>[^"]+)"')
_REMOTE_RE = re.compile(r"^https?://\S+$")
_FILE_URL_RE = re.compile(r"^file://\S+$")
_ESCAPES = {r"\{\{": "{{", r"\{\%": "{%", r"\{%": "{%"}
_ESCAPE_RE = re.compile("|".join(re.escape(escape) for escape in _ESCAPES))

NAME_PATTERN = r"^[-_.a-zA-Z0-9]+$"
INDENT_PATTERN = r"^[0-9]+$"

PARAM_PATTERNS: dict[str, str] = {
    "snippet": NAME_PATTERN,
    "syntax": NAME_PATTERN,
    "indent": INDENT_PATTERN,
}

_markup_environment = Environment(enable_async=True)


async def render_markup(
    raw_markup: str,
    variables: Mapping[str, Any] | None = None,
    environment: Environment | None = None,
) -> str:
    """Render nested template syntax, undo defensive escapes, and trim.

    ``environment`` must be created with ``enable_async=True``.
    """
    environment = environment or _markup_environment
    try:
        template = environment.from_string(raw_markup)
        rendered = await template.render_async(**dict(variables or {}))
    except TemplateError as exc:
        raise DocsnipError(
            code=ErrorCode.PARSE_ERROR,
            message=f"Can't parse include_file tag params: {raw_markup} ({exc})",
        ) from exc

    rendered = _ESCAPE_RE.sub(lambda match: _ESCAPES[match.group(0)], rendered).strip()
    log.debug("markup_rendered", markup=rendered)
    return rendered


def parse_markup(markup: str, raw_markup: str | None = None) -> InclusionRequest:
    """Build a validated InclusionRequest from rendered markup.

    Raises DocsnipError with PARSE_ERROR when the markup does not match the
    tag grammar and INVALID_PARAMETER when a known parameter is malformed.
    """
    match = _MARKUP_RE.fullmatch(markup)
    log.debug("markup_matched", markup=markup, matched=match is not None)
    if match is None:
        raise DocsnipError(
            code=ErrorCode.PARSE_ERROR,
            message=f"Can't parse include_file tag params: {raw_markup or markup}",
        )

    params = {
        param.group("name"): param.group("value")
        for param in _PARAM_RE.finditer(match.group("params"))
    }
    for name, pattern in PARAM_PATTERNS.items():
        _validate_param(params, name, pattern)

    path = match.group("path")
    if _REMOTE_RE.match(path):
        source = RemoteUrl(url=path)
    elif _FILE_URL_RE.match(path):
        source = FileUrl(path=path.removeprefix("file://").replace("\\", "/"))
    else:
        source = LocalPath(path=path)

    request = InclusionRequest(source=source, params=params)
    log.debug("params_set", source=source.describe(), params=params)
    return request


def _validate_param(params: dict[str, str], name: str, pattern: str) -> None:
    value = params.get(name)
    if value is not None and not re.match(pattern, value):
        raise DocsnipError(
            code=ErrorCode.INVALID_PARAMETER,
            message=(
                f"Parameter '{name}' with value '{value}' is not valid, "
                f"must match regex: {pattern}"
            ),
        )
