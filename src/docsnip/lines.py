"""Line classifier for included source files.

Every transform step consumes the same classification instead of re-deriving
marker patterns inline. Lines keep their terminators so steps can re-join
them without guessing at the original line endings.

Marker syntax recognised inside source files::

    [<snippet NAME>] ... [<endsnippet NAME>]     named region
    [<csharp>] documentation line                 language-specific doc line
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

_MARKER_RE = re.compile(r"\[<(end)?snippet\s+([^>]+)>\]")
_DOC_RE = re.compile(r"\[<(\w+)>\]")
_USING_RE = re.compile(r"^using [\w.]+;")
_NAMESPACE_RE = re.compile(r"^namespace [\w.]+;")


@dataclass(frozen=True)
class Marker:
    kind: Literal["start", "end"]
    name: str


@dataclass(frozen=True)
class DocLine:
    lang: str
    prefix: str  # Text before the [<lang>] tag
    text: str  # Text after the tag, leading blanks removed

    def render(self) -> str:
        return self.prefix + self.text


@dataclass(frozen=True)
class PlainLine:
    text: str


Line = Marker | DocLine | PlainLine


def classify_line(line: str) -> Line:
    """Classify a single line (terminator included)."""
    match = _MARKER_RE.search(line)
    if match:
        kind: Literal["start", "end"] = "end" if match.group(1) else "start"
        return Marker(kind=kind, name=match.group(2).strip())

    match = _DOC_RE.search(line)
    if match:
        return DocLine(
            lang=match.group(1),
            prefix=line[: match.start()],
            text=line[match.end() :].lstrip(" \t"),
        )

    return PlainLine(text=line)


def is_header_line(line: str) -> bool:
    """True for copyright comments, ``using``/``namespace`` statements and directives."""
    stripped = line.strip()
    return (
        stripped.startswith("// Copyright")
        or _USING_RE.match(stripped) is not None
        or _NAMESPACE_RE.match(stripped) is not None
        or stripped.startswith("#")
    )


def is_blank(line: str) -> bool:
    return not line.strip()


def leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]
