# doc_scout/pipeline/stages/__init__.py
from .html import (
    DEFAULT_REMOVE_SELECTORS,
    HtmlLinkExtractorStage,
    HtmlMetadataStage,
    HtmlParserStage,
    HtmlSanitizerStage,
    HtmlToMarkdownStage,
)
from .json import JsonMetadataStage, JsonNormalizeStage, JsonParserStage
from .markdown import MarkdownLinkExtractorStage, MarkdownMetadataStage
from .render import BrowserManager, PlaywrightRenderStage

__all__ = [
    "DEFAULT_REMOVE_SELECTORS",
    "BrowserManager",
    "HtmlLinkExtractorStage",
    "HtmlMetadataStage",
    "HtmlParserStage",
    "HtmlSanitizerStage",
    "HtmlToMarkdownStage",
    "JsonMetadataStage",
    "JsonNormalizeStage",
    "JsonParserStage",
    "MarkdownLinkExtractorStage",
    "MarkdownMetadataStage",
    "PlaywrightRenderStage",
]
