"""Command-line entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Load Settings, apply command-line overrides
- Render the requested pages and write them to the output directory

Failed includes never change the exit status: they are rendered inline and
logged, and the rest of the site still builds.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from docsnip import __version__
from docsnip.config import Settings
from docsnip.renderer import HTML_SUFFIXES, open_site, render_site

if TYPE_CHECKING:
    from collections.abc import Sequence

    from docsnip.renderer import RenderedPage

log = structlog.get_logger()

PAGE_SUFFIXES = frozenset({".md", ".markdown", *HTML_SUFFIXES})


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # stdout is reserved for rendered output
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Page discovery and output
# ---------------------------------------------------------------------------


def discover_pages(source_root: Path, exclude: Path | None = None) -> list[str]:
    """Find renderable pages, skipping ``_*`` and hidden directories."""
    pages: list[str] = []
    for path in sorted(source_root.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in PAGE_SUFFIXES:
            continue
        if exclude is not None and path.is_relative_to(exclude):
            continue
        rel = path.relative_to(source_root)
        if any(part.startswith(("_", ".")) for part in rel.parts[:-1]):
            continue
        pages.append(rel.as_posix())
    return pages


def write_page(page: RenderedPage, output_dir: Path | None) -> None:
    if output_dir is None:
        sys.stdout.write(page.output)
        return
    target = (output_dir / page.path).with_suffix(page.output_ext)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(page.output, encoding="utf-8")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsnip",
        description="Render documentation pages with snippet-aware file inclusion.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "pages",
        nargs="*",
        help="Pages to render, relative to the source directory (default: all pages).",
    )
    parser.add_argument("--source", help="Site source directory (overrides config).")
    parser.add_argument(
        "--output",
        type=Path,
        help="Directory for rendered pages; prints to stdout when omitted.",
    )
    parser.add_argument("--lang", help="Documentation language for [<lang>] comment lines.")
    return parser


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


async def run(settings: Settings, pages: Sequence[str], output_dir: Path | None) -> int:
    if not pages:
        exclude = output_dir.resolve() if output_dir is not None else None
        pages = discover_pages(settings.source_root, exclude=exclude)

    async with open_site(settings) as state:
        rendered = await render_site(pages, state)

    for page in rendered:
        write_page(page, output_dir)

    log.info("build_complete", version=__version__, pages=len(rendered))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    overrides: dict[str, str] = {}
    if args.source:
        overrides["source"] = args.source
    if args.lang:
        overrides["lang"] = args.lang
    settings = Settings(site=overrides) if overrides else Settings()

    setup_logging(settings)
    return asyncio.run(run(settings, args.pages, args.output))


if __name__ == "__main__":
    sys.exit(main())
