# doc_scout/pipeline/html.py
from __future__ import annotations

from typing import List

from doc_scout.config import ScrapeMode, ScrapeOptions
from doc_scout.pipeline.base import BasePipeline
from doc_scout.pipeline.context import Stage
from doc_scout.pipeline.stages import (
    BrowserManager,
    HtmlLinkExtractorStage,
    HtmlMetadataStage,
    HtmlParserStage,
    HtmlSanitizerStage,
    HtmlToMarkdownStage,
    PlaywrightRenderStage,
)
from doc_scout.utils import is_html


class HtmlPipeline(BasePipeline):
    """HTML → Markdown; links are taken before the sanitizer strips navigation."""

    def __init__(self, browsers: BrowserManager | None = None) -> None:
        super().__init__(
            [
                HtmlParserStage(),
                HtmlMetadataStage(),
                HtmlLinkExtractorStage(),
                HtmlSanitizerStage(),
                HtmlToMarkdownStage(),
            ]
        )
        self.browsers = browsers or BrowserManager()
        self.render_stage = PlaywrightRenderStage(self.browsers)

    def can_process(self, mime_type: str) -> bool:
        return is_html(mime_type)

    def stages_for(self, options: ScrapeOptions) -> List[Stage]:
        if options.scrape_mode in (ScrapeMode.PLAYWRIGHT.value, ScrapeMode.AUTO.value):
            return [self.render_stage, *self.stages]
        return list(self.stages)

    async def close(self) -> None:
        await self.browsers.close()
