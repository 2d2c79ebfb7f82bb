"""Shared test fixtures for the docsnip test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from docsnip.config import Settings
from docsnip.state import RenderContext

if TYPE_CHECKING:
    from pathlib import Path

DEMO_SOURCE = (
    "// Copyright 2024\n"
    "using System;\n"
    "\n"
    "[<snippet demo>]\n"
    '    Console.WriteLine("hi");\n'
    "[<endsnippet demo>]\n"
)


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def demo_source() -> str:
    return DEMO_SOURCE


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def site_dir(tmp_path: Path) -> Path:
    """A site source root with a few includable files."""
    source = tmp_path / "site"
    (source / "code").mkdir(parents=True)
    (source / "code" / "Demo.cs").write_text(DEMO_SOURCE, encoding="utf-8")
    (source / "code" / "Docs.cs").write_text(
        "[<snippet documented>]\n"
        "        // [<csharp>] Writes a greeting.\n"
        "        // [<vb>] Schreibt einen Gruss.\n"
        "        Greet();\n"
        "[<endsnippet documented>]\n",
        encoding="utf-8",
    )
    return source


@pytest.fixture()
def settings(site_dir: Path) -> Settings:
    return Settings(site={"source": str(site_dir), "lang": "csharp"})


@pytest.fixture()
def render_context(settings: Settings) -> RenderContext:
    return RenderContext(
        source_root=settings.source_root,
        page_path="lessons/intro.md",
        lang="csharp",
    )
