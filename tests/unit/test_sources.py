"""Unit tests for docsnip.sources."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest

from docsnip.errors import DocsnipError, ErrorCode
from docsnip.models.request import FileUrl, InclusionRequest, LocalPath, RemoteUrl
from docsnip.sources import load_source
from docsnip.state import SiteState

if TYPE_CHECKING:
    from pathlib import Path

    from docsnip.config import Settings
    from docsnip.state import RenderContext


class TestLoadSource:
    async def test_local_path_is_relative_to_source_root(
        self, settings: Settings, render_context: RenderContext, demo_source: str
    ) -> None:
        request = InclusionRequest(source=LocalPath(path="code/Demo.cs"))
        text = await load_source(request, render_context, SiteState(settings=settings))
        assert text == demo_source

    async def test_missing_local_file(
        self, settings: Settings, render_context: RenderContext
    ) -> None:
        request = InclusionRequest(source=LocalPath(path="code/Missing.cs"))
        with pytest.raises(DocsnipError) as exc_info:
            await load_source(request, render_context, SiteState(settings=settings))
        assert exc_info.value.code == ErrorCode.FILE_READ_FAILED
        assert "(for 'code/Missing.cs')" in exc_info.value.message

    async def test_file_url_reads_absolute_path(
        self, settings: Settings, render_context: RenderContext, tmp_path: Path
    ) -> None:
        target = tmp_path / "Elsewhere.cs"
        target.write_text("class Elsewhere { }\n", encoding="utf-8")
        request = InclusionRequest(source=FileUrl(path=target.as_posix()))
        text = await load_source(request, render_context, SiteState(settings=settings))
        assert text == "class Elsewhere { }\n"

    async def test_missing_file_url(
        self, settings: Settings, render_context: RenderContext, tmp_path: Path
    ) -> None:
        request = InclusionRequest(source=FileUrl(path=(tmp_path / "nope.cs").as_posix()))
        with pytest.raises(DocsnipError) as exc_info:
            await load_source(request, render_context, SiteState(settings=settings))
        assert exc_info.value.code == ErrorCode.FETCH_FAILED

    async def test_remote_url_is_rewritten_and_fetched(
        self, settings: Settings, render_context: RenderContext
    ) -> None:
        fetcher = AsyncMock()
        fetcher.fetch.return_value = "remote body"
        state = SiteState(settings=settings, fetcher=fetcher)
        request = InclusionRequest(
            source=RemoteUrl(url="https://github.com/acme/samples/tree/main/Demo.cs")
        )

        assert await load_source(request, render_context, state) == "remote body"
        fetcher.fetch.assert_awaited_once_with(
            "https://raw.githubusercontent.com/acme/samples/main/Demo.cs"
        )

    async def test_remote_url_without_fetcher(
        self, settings: Settings, render_context: RenderContext
    ) -> None:
        request = InclusionRequest(source=RemoteUrl(url="https://example.com/a.cs"))
        with pytest.raises(RuntimeError):
            await load_source(request, render_context, SiteState(settings=settings))
