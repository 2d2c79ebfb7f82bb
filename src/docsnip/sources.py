"""Resolve an InclusionRequest's source locator into raw text."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from docsnip.errors import DocsnipError, ErrorCode
from docsnip.fetcher import convert_github_url_to_raw
from docsnip.models.request import FileUrl, LocalPath, RemoteUrl

if TYPE_CHECKING:
    from docsnip.models.request import InclusionRequest
    from docsnip.state import RenderContext, SiteState

log = structlog.get_logger()


async def load_source(request: InclusionRequest, ctx: RenderContext, state: SiteState) -> str:
    """Return the full text of the requested file.

    Raises DocsnipError (FILE_READ_FAILED or FETCH_FAILED) when the source
    cannot be read.
    """
    source = request.source
    if isinstance(source, LocalPath):
        return _read_local_file(source, ctx, state.settings.site.encoding)
    if isinstance(source, FileUrl):
        return _read_file_url(source, state.settings.site.encoding)
    if isinstance(source, RemoteUrl):
        return await _fetch_remote_file(source, state)
    raise TypeError(f"Unsupported source locator: {source!r}")


def _read_local_file(source: LocalPath, ctx: RenderContext, encoding: str) -> str:
    abs_path = ctx.source_root / source.path
    log.debug("reading_local_file", path=str(abs_path))
    try:
        return abs_path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise DocsnipError(
            code=ErrorCode.FILE_READ_FAILED,
            message=(
                f"Can't get the contents of specified local file '{abs_path}' "
                f"(for '{source.path}'): {exc}"
            ),
        ) from exc


def _read_file_url(source: FileUrl, encoding: str) -> str:
    log.debug("reading_file_url", path=source.path)
    try:
        return Path(source.path).read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise DocsnipError(
            code=ErrorCode.FETCH_FAILED,
            message=f"An error occurred while fetching the file '{source.path}': {exc}",
        ) from exc


async def _fetch_remote_file(source: RemoteUrl, state: SiteState) -> str:
    if state.fetcher is None:
        raise RuntimeError("Fetcher not initialized")
    url = convert_github_url_to_raw(source.url)
    log.debug("fetching_remote_file", url=url)
    return await state.fetcher.fetch(url)
