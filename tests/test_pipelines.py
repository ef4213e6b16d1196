# File: tests/test_pipelines.py
import json

import pytest

from doc_scout.config import ScrapeOptions
from doc_scout.crawler.models import RawContent
from doc_scout.pipeline import (
    DirectoryPipeline,
    HtmlPipeline,
    JsonPipeline,
    MarkdownPipeline,
    default_pipelines,
    select_pipeline,
)
from doc_scout.pipeline.stages import PlaywrightRenderStage

URL = "https://example.com/docs/guide/"

HTML = """
<html lang="en">
<head>
  <title>
    Getting   Started
  </title>
  <meta name="description" content="Intro guide">
  <script>var x = 1;</script>
</head>
<body>
  <nav><a href="/docs/nav-link">Nav</a></nav>
  <main>
    <h1>Welcome</h1>
    <p>Read the <a href="install">install notes</a> and <a href="../api#auth">API</a>.</p>
    <div class="ads">Buy now</div>
    <div class="custom-remove">remove me</div>
    <pre><code class="language-python">print("hi")</code></pre>
    <a href="mailto:team@example.com">mail</a>
  </main>
  <footer>footer text</footer>
</body>
</html>
"""


def raw(content, mime, url=URL, charset="utf-8"):
    data = content.encode(charset) if isinstance(content, str) else content
    return RawContent(content=data, mime_type=mime, source_url=url, charset=charset)


@pytest.fixture()
def options():
    return ScrapeOptions(url=URL, exclude_selectors=[".custom-remove"])


def test_default_pipelines_order_and_selection():
    pipelines = default_pipelines()
    assert [type(p) for p in pipelines] == [HtmlPipeline, JsonPipeline, MarkdownPipeline, DirectoryPipeline]
    assert isinstance(select_pipeline(pipelines, "text/html"), HtmlPipeline)
    assert isinstance(select_pipeline(pipelines, "application/xhtml+xml"), HtmlPipeline)
    assert isinstance(select_pipeline(pipelines, "application/vnd.api+json"), JsonPipeline)
    assert isinstance(select_pipeline(pipelines, "text/x-markdown"), MarkdownPipeline)
    assert isinstance(select_pipeline(pipelines, "text/plain"), MarkdownPipeline)
    assert isinstance(select_pipeline(pipelines, "inode/directory"), DirectoryPipeline)
    assert select_pipeline(pipelines, "image/png") is None


# --------------------------------------------------------------------------- #
#                                    HTML                                     #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_html_pipeline_converts_to_markdown(options):
    result = await HtmlPipeline().process(raw(HTML, "text/html"), options)

    assert result.errors == []
    assert result.metadata["title"] == "Getting Started"
    assert result.metadata["description"] == "Intro guide"
    assert result.metadata["language"] == "en"
    assert "# Welcome" in result.text_content
    assert "```python" in result.text_content
    for removed in ("Buy now", "remove me", "footer text", "var x"):
        assert removed not in result.text_content


@pytest.mark.asyncio()
async def test_html_links_resolved_before_sanitizing(options):
    result = await HtmlPipeline().process(raw(HTML, "text/html"), options)
    assert result.links == [
        "https://example.com/docs/nav-link",
        "https://example.com/docs/guide/install",
        "https://example.com/docs/api",
    ]


@pytest.mark.asyncio()
async def test_html_without_title_is_untitled(options):
    result = await HtmlPipeline().process(raw("<p>hello</p>", "text/html"), options)
    assert result.metadata["title"] == "Untitled"
    assert result.text_content == "hello"


@pytest.mark.asyncio()
async def test_html_decodes_declared_charset(options):
    page = "<html><head><title>Привет</title></head><body>мир</body></html>"
    result = await HtmlPipeline().process(raw(page, "text/html", charset="cp1251"), options)
    assert result.metadata["title"] == "Привет"
    assert "мир" in result.text_content


@pytest.mark.asyncio()
async def test_invalid_selector_is_recorded_and_others_still_apply():
    opts = ScrapeOptions(url=URL, exclude_selectors=["div[", ".custom-remove"])
    result = await HtmlPipeline().process(raw(HTML, "text/html"), opts)
    assert len(result.errors) == 1
    assert "div[" in str(result.errors[0])
    assert "remove me" not in result.text_content
    assert "# Welcome" in result.text_content


def test_render_stage_only_in_browser_modes():
    pipeline = HtmlPipeline()
    fetch_stages = pipeline.stages_for(ScrapeOptions(url=URL))
    auto_stages = pipeline.stages_for(ScrapeOptions(url=URL, scrape_mode="auto"))
    assert not any(isinstance(s, PlaywrightRenderStage) for s in fetch_stages)
    assert isinstance(auto_stages[0], PlaywrightRenderStage)


@pytest.mark.asyncio()
async def test_html_pipeline_close_without_browser():
    pipeline = HtmlPipeline()
    await pipeline.close()
    assert not pipeline.browsers.started


# --------------------------------------------------------------------------- #
#                                  Markdown                                   #
# --------------------------------------------------------------------------- #

MARKDOWN = """---
title: Front Title
tags: [a, b]
---
# Heading Title

See [install](install.md), ![img](img/logo.png) and <https://other.example.com/x>.

```
[not a link](ignored.md)
```

[ref]: https://example.com/ref "Reference"
[anchor](#section)
"""


@pytest.mark.asyncio()
async def test_markdown_front_matter_and_links(options):
    result = await MarkdownPipeline().process(raw(MARKDOWN, "text/markdown"), options)
    assert result.errors == []
    assert result.metadata["title"] == "Front Title"
    assert result.metadata["tags"] == ["a", "b"]
    assert result.links == [
        "https://example.com/docs/guide/install.md",
        "https://example.com/docs/guide/img/logo.png",
        "https://other.example.com/x",
        "https://example.com/ref",
    ]
    # content passes through unchanged
    assert result.text_content == MARKDOWN


@pytest.mark.asyncio()
async def test_markdown_title_from_first_heading(options):
    text = "```\n# not this\n```\nintro\n\n# Real Title\n\n## Sub\n"
    result = await MarkdownPipeline().process(raw(text, "text/markdown"), options)
    assert result.metadata["title"] == "Real Title"


@pytest.mark.asyncio()
async def test_markdown_bad_front_matter_is_recorded(options):
    text = "---\n: [unclosed\n---\n# Title\n"
    result = await MarkdownPipeline().process(raw(text, "text/markdown"), options)
    assert len(result.errors) == 1
    assert result.metadata["title"] == "Title"


@pytest.mark.asyncio()
async def test_plain_text_goes_through_markdown_pipeline(options):
    result = await MarkdownPipeline().process(raw("just text", "text/plain"), options)
    assert result.text_content == "just text"
    assert result.metadata["title"] == "Untitled"


# --------------------------------------------------------------------------- #
#                                    JSON                                     #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_json_pipeline_normalizes(options):
    body = '{"name": "Widget API", "items": [1,2], "note": "ü"}'
    result = await JsonPipeline().process(raw(body, "application/json", url="https://example.com/api.json"), options)
    assert result.errors == []
    assert result.metadata["title"] == "Widget API"
    assert result.metadata["json_type"] == "dict"
    assert json.loads(result.text_content) == json.loads(body)
    assert '\n  "items"' in result.text_content
    assert "ü" in result.text_content


@pytest.mark.asyncio()
async def test_json_title_falls_back_to_url(options):
    result = await JsonPipeline().process(raw("[1, 2]", "application/json", url="https://example.com/data/list.json"), options)
    assert result.metadata["title"] == "list.json"


@pytest.mark.asyncio()
async def test_invalid_json_is_fail_closed(options):
    body = "{not json"
    result = await JsonPipeline().process(raw(body, "application/json"), options)
    assert len(result.errors) == 1
    assert "title" not in result.metadata
    assert result.text_content == body


# --------------------------------------------------------------------------- #
#                                 Directory                                   #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_directory_listing_becomes_links():
    listing = "file:///srv/docs/a.md\nfile:///srv/docs/sub/\n"
    opts = ScrapeOptions(url="file:///srv/docs/")
    result = await DirectoryPipeline().process(
        RawContent(content=listing, mime_type="inode/directory", source_url="file:///srv/docs/"), opts
    )
    assert result.links == ["file:///srv/docs/a.md", "file:///srv/docs/sub/"]
    assert result.metadata["title"] == "docs"
    assert result.metadata["entries"] == 2
