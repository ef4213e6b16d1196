# doc_scout/pipeline/markdown.py
from __future__ import annotations

from doc_scout.pipeline.base import BasePipeline
from doc_scout.pipeline.stages import MarkdownLinkExtractorStage, MarkdownMetadataStage
from doc_scout.utils import is_markdown, is_text


class MarkdownPipeline(BasePipeline):
    """Markdown and any other ``text/*`` content, which passes through as-is."""

    def __init__(self) -> None:
        super().__init__([MarkdownMetadataStage(), MarkdownLinkExtractorStage()])

    def can_process(self, mime_type: str) -> bool:
        return is_markdown(mime_type) or is_text(mime_type)
