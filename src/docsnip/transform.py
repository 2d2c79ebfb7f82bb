"""Content transform pipeline for included files.

Each step takes text and returns text; none of them touch external state.
``apply_pipeline`` runs them in the order that matters for correctness:

  1. header removal            (whole-file includes only)
  2. snippet extraction        (or removal of every snippet marker)
  3. excess indentation removal (snippet includes only)
  4. trim
  5. per-language comment filtering
  6. re-indentation
  7. optional fenced code block

Only step 2 can fail.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from docsnip.errors import DocsnipError, ErrorCode
from docsnip.lines import (
    DocLine,
    Marker,
    classify_line,
    is_blank,
    is_header_line,
    leading_whitespace,
)

if TYPE_CHECKING:
    from docsnip.models.request import InclusionRequest

log = structlog.get_logger()

BOM = "\ufeff"


def remove_header(text: str) -> str:
    """Drop a leading BOM, header lines, and blank lines right after them."""
    if text.startswith(BOM):
        text = text[len(BOM) :]

    kept: list[str] = []
    prev_removed = False
    for line in text.splitlines(keepends=True):
        if is_header_line(line):
            prev_removed = True
        elif prev_removed and is_blank(line):
            continue
        else:
            kept.append(line)
            prev_removed = False
    return "".join(kept)


def pick_snippet(text: str, name: str, source: str = "") -> str:
    """Return the lines between ``[<snippet name>]`` and ``[<endsnippet name>]``.

    Marker lines of other snippets are skipped. The result is prefixed with
    the leading whitespace of the snippet's first line followed by a newline;
    that prefix line is blank, so later indentation and trim steps drop it.
    """
    content: list[str] = []
    start_found = False
    end_found = False

    for line in text.splitlines(keepends=True):
        kind = classify_line(line)
        if isinstance(kind, Marker):
            if kind.name == name and kind.kind == "start":
                if start_found:
                    raise DocsnipError(
                        code=ErrorCode.SNIPPET_DUPLICATE,
                        message=(
                            f"Snippet '{name}' occurred twice. Each snippet should have "
                            "a unique name, same name not allowed."
                        ),
                    )
                start_found = True
                log.debug("snippet_start", snippet=name, line=line.rstrip())
            elif kind.name == name:
                end_found = True
                log.debug("snippet_end", snippet=name, line=line.rstrip())
                break
            else:
                log.debug("snippet_marker_skipped", snippet=name, line=line.rstrip())
            continue

        if start_found:
            content.append(line)

    if not start_found:
        raise DocsnipError(
            code=ErrorCode.SNIPPET_NOT_FOUND,
            message=f"Snippet '{name}' has not been found in '{source}'.",
        )
    if not end_found:
        raise DocsnipError(
            code=ErrorCode.SNIPPET_TRUNCATED,
            message=f"End of the snippet '{name}' has not been found.",
        )

    snippet = "".join(content)
    if not snippet.strip():
        raise DocsnipError(
            code=ErrorCode.SNIPPET_EMPTY,
            message=f"Snippet '{name}' appears to be empty. Fix and retry.",
        )

    return f"{leading_whitespace(snippet)}\n{snippet}"


def remove_all_snippets(text: str) -> str:
    """Drop every ``[<snippet ...>]`` / ``[<endsnippet ...>]`` line."""
    return "".join(
        line for line in text.splitlines(keepends=True) if not isinstance(classify_line(line), Marker)
    )


def remove_excessive_indentation(text: str) -> str:
    """Shift every non-blank line left by the smallest indentation found."""
    lines = text.splitlines(keepends=True)
    indents = [len(leading_whitespace(line)) for line in lines if not is_blank(line)]
    if not indents:
        return text

    lowest = min(indents)
    return "".join(line if is_blank(line) else line[lowest:] for line in lines)


def render_comments(text: str, lang: str | None) -> str:
    """Keep ``[<lang>]`` doc lines with the tag removed; drop other languages' lines."""
    rendered: list[str] = []
    for line in text.splitlines(keepends=True):
        kind = classify_line(line)
        if not isinstance(kind, DocLine):
            rendered.append(line)
        elif lang is not None and kind.lang == lang:
            rendered.append(kind.render())
        else:
            log.debug("doc_line_skipped", lang=kind.lang, line=line.rstrip())
    return "".join(rendered)


def add_indentation(text: str, indent: int) -> str:
    """Prefix ``indent`` spaces to every line except the first.

    Trailing empty lines are dropped first, so a doc line removed from the end
    of the text leaves no padded blank line behind.
    """
    lines = text.rstrip("\n").split("\n")
    padding = " " * indent
    return "\n".join([lines[0], *(padding + line for line in lines[1:])])


def wrap_in_codeblock(text: str, syntax: str) -> str:
    return f"```{syntax}\n{text}\n```"


def apply_pipeline(
    text: str,
    request: InclusionRequest,
    lang: str | None,
    source: str = "",
) -> str:
    """Run all transform steps for one include request."""
    if request.snippet:
        text = pick_snippet(text, request.snippet, source)
        text = remove_excessive_indentation(text)
    else:
        text = remove_header(text)
        text = remove_all_snippets(text)

    text = text.strip()
    text = render_comments(text, lang)
    text = add_indentation(text, request.indent)

    if request.syntax:
        text = wrap_in_codeblock(text, request.syntax)
    return text
