"""Unit tests for the Jinja2 tag extensions."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from jinja2 import Environment, TemplateSyntaxError
from structlog.testing import capture_logs

from docsnip.renderer import build_environment
from docsnip.state import SiteState
from docsnip.tags import IncludeFileExtension, render_embedded

if TYPE_CHECKING:
    from docsnip.config import Settings

PAGE = {"path": "lessons/intro.md"}


@pytest.fixture()
def environment(settings: Settings) -> Environment:
    return build_environment(SiteState(settings=settings))


# ---------------------------------------------------------------------------
# include_file
# ---------------------------------------------------------------------------


class TestIncludeFileTag:
    def test_preprocess_quotes_raw_markup(self, environment: Environment) -> None:
        extension = IncludeFileExtension(environment)
        source = 'A {% include_file "code/{{ page.file }}" snippet="demo" %} B'
        assert extension.preprocess(source, None) == (
            'A {% include_file "\\"code/{{ page.file }}\\" snippet=\\"demo\\"" %} B'
        )

    def test_preprocess_keeps_whitespace_control(self, environment: Environment) -> None:
        extension = IncludeFileExtension(environment)
        assert extension.preprocess("{%- include_file a.cs -%}", None) == (
            '{%- include_file "a.cs" -%}'
        )

    def test_preprocess_skips_raw_blocks(self, environment: Environment) -> None:
        extension = IncludeFileExtension(environment)
        source = '{% raw %}{% include_file "a.cs" snippet="x" %}{% endraw %}'
        assert extension.preprocess(source, None) == source

    async def test_raw_block_shows_tag_literally(self, environment: Environment) -> None:
        template = environment.from_string(
            'Usage: {% raw %}{% include_file "a.cs" snippet="x" %}{% endraw %}\n'
            '{% include_file "code/Demo.cs" snippet="demo" %}'
        )
        output = await template.render_async(page=PAGE)
        assert output == (
            'Usage: {% include_file "a.cs" snippet="x" %}\nConsole.WriteLine("hi");'
        )

    async def test_renders_snippet(self, environment: Environment) -> None:
        template = environment.from_string(
            'Code:\n{% include_file "code/Demo.cs" snippet="demo" %}\nDone.'
        )
        output = await template.render_async(page=PAGE)
        assert output == 'Code:\nConsole.WriteLine("hi");\nDone.'

    async def test_nested_expression_in_markup(self, environment: Environment) -> None:
        template = environment.from_string(
            '{% include_file "code/{{ page.file }}" snippet="demo" syntax="csharp" %}'
        )
        output = await template.render_async(page={**PAGE, "file": "Demo.cs"})
        assert output == '```csharp\nConsole.WriteLine("hi");\n```'

    async def test_page_language_selects_doc_lines(self, environment: Environment) -> None:
        template = environment.from_string('{% include_file "code/Docs.cs" snippet="documented" %}')
        output = await template.render_async(page={**PAGE, "lang": "vb"})
        assert output == "// Schreibt einen Gruss.\nGreet();"

    async def test_errors_render_inline(self, environment: Environment) -> None:
        template = environment.from_string('{% include_file "code/Missing.cs" %} after')
        output = await template.render_async(page=PAGE)
        assert output.startswith("ERROR: Can't get the contents of specified local file")
        assert output.endswith(" in lessons/intro.md after")

    async def test_missing_state_is_reported(self) -> None:
        environment = Environment(enable_async=True, extensions=[IncludeFileExtension])
        template = environment.from_string('{% include_file "a.cs" %}')
        with pytest.raises(RuntimeError):
            await template.render_async(page=PAGE)


# ---------------------------------------------------------------------------
# embedded
# ---------------------------------------------------------------------------


class TestEmbeddedTag:
    EXPECTED = (
        '<div id="tabs1"></div><script>'
        "$('#tabs1').load('/samples/logging.html #content',     function(data) {"
        "        $('#tabs1 .tabGroup').tabs();    } ); </script> "
    )

    def test_render_embedded(self) -> None:
        assert render_embedded("tabs1", "/samples/logging.html", "content") == self.EXPECTED

    async def test_tag(self, environment: Environment) -> None:
        template = environment.from_string(
            '{% embedded id="tabs1" url="/samples/logging.html" node="content" %}'
        )
        assert await template.render_async(page=PAGE) == self.EXPECTED

    async def test_attributes_accept_expressions(self, environment: Environment) -> None:
        template = environment.from_string(
            '{% embedded id="tabs1" url=page.sample node="content" %}'
        )
        output = await template.render_async(page={**PAGE, "sample": "/samples/logging.html"})
        assert output == self.EXPECTED

    def test_missing_attribute_is_syntax_error(self, environment: Environment) -> None:
        with pytest.raises(TemplateSyntaxError, match="node"):
            environment.from_string('{% embedded id="tabs1" url="/x.html" %}')


# ---------------------------------------------------------------------------
# warn
# ---------------------------------------------------------------------------


class TestWarnTag:
    async def test_logs_and_renders_nothing(self, environment: Environment) -> None:
        template = environment.from_string('a{% warn "  Lesson 3 is a draft " %}b')
        with capture_logs() as logs:
            output = await template.render_async(page=PAGE)

        assert output == "ab"
        warnings = [entry for entry in logs if entry["log_level"] == "warning"]
        assert warnings == [
            {
                "event": "template_warning",
                "page": "lessons/intro.md",
                "message": "Lesson 3 is a draft",
                "log_level": "warning",
            }
        ]
