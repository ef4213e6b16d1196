# doc_scout/pipeline/stages/html.py
"""HTML stages: parse, metadata, links, sanitize, convert to Markdown.

Only the parser is fail-closed; once a tree exists every later stage records
its own failure and hands over to the next one.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag
from markdownify import ATX, markdownify

from doc_scout.errors import StageError
from doc_scout.pipeline.context import Proceed, ProcessingContext
from doc_scout.utils import is_html, resolve_url

logger = logging.getLogger("DocScout")

__all__: Sequence[str] = (
    "HtmlParserStage",
    "HtmlMetadataStage",
    "HtmlLinkExtractorStage",
    "HtmlSanitizerStage",
    "HtmlToMarkdownStage",
    "DEFAULT_REMOVE_SELECTORS",
)

DEFAULT_REMOVE_SELECTORS: Sequence[str] = (
    "nav",
    "footer",
    "script",
    "style",
    "noscript",
    "svg",
    "link",
    "meta",
    "iframe",
    "header",
    "button",
    "input",
    "textarea",
    "select",
    ".ads",
    ".advertisement",
    ".banner",
    ".cookie-banner",
    ".cookie-consent",
    ".hidden",
    ".hide",
    ".modal",
    ".nav-bar",
    ".overlay",
    ".popup",
    ".promo",
    ".mw-editsection",
    ".side-bar",
    ".social-share",
    ".sticky",
    "#ads",
    "#banner",
    "#cookieBanner",
    "#modal",
    "#nav",
    "#overlay",
    "#popup",
    "#sidebar",
    "#socialMediaBox",
    "#stickyHeader",
    "#ad-container",
    ".ad-container",
    ".login-form",
    ".signup-form",
    ".tooltip",
    ".dropdown-menu",
    ".breadcrumb",
    ".pagination",
    '[role="banner"]',
    '[role="dialog"]',
    '[role="alertdialog"]',
    '[role="region"][aria-label*="skip" i]',
    '[aria-modal="true"]',
    ".noprint",
)

_LANGUAGE_CLASS_RE = re.compile(r"(?:highlight-source-|highlight-|language-|lang-)(\w+)")
_SKIP_HREF_PREFIXES = ("mailto:", "javascript:", "tel:", "data:")


def _soup(context: ProcessingContext) -> Optional[BeautifulSoup]:
    if isinstance(context.document, BeautifulSoup):
        return context.document
    if is_html(context.content_type):
        logger.warning("HTML tree missing for %s, stage skipped", context.source_url)
    return None


class HtmlParserStage:
    """Parses ``context.content`` into a BeautifulSoup tree (lxml backend).

    Fail-closed: without a tree nothing downstream is meaningful, so a parse
    failure ends the run.
    """

    async def process(self, context: ProcessingContext, proceed: Proceed) -> None:
        if not is_html(context.content_type):
            await proceed()
            return
        try:
            logger.debug("Parsing HTML content from %s", context.source_url)
            context.document = BeautifulSoup(context.content, "lxml")
        except Exception as exc:
            logger.error("Failed to parse HTML for %s: %s", context.source_url, exc)
            context.errors.append(StageError(f"HTML parsing failed: {exc}"))
            return
        await proceed()


class HtmlMetadataStage:
    """Title (``<title>``, whitespace collapsed, default ``Untitled``), description, language."""

    async def process(self, context: ProcessingContext, proceed: Proceed) -> None:
        soup = _soup(context)
        if soup is not None:
            try:
                title_tag = soup.find("title")
                title = title_tag.get_text() if title_tag else ""
                context.metadata["title"] = " ".join(title.split()) or "Untitled"

                description = soup.find("meta", attrs={"name": "description"})
                if isinstance(description, Tag) and description.get("content"):
                    context.metadata["description"] = str(description["content"]).strip()
                html_tag = soup.find("html")
                if isinstance(html_tag, Tag) and html_tag.get("lang"):
                    context.metadata["language"] = str(html_tag["lang"])
            except Exception as exc:
                logger.error("Error extracting metadata from %s: %s", context.source_url, exc)
                context.errors.append(StageError(f"Failed to extract metadata from HTML: {exc}"))
        await proceed()


class HtmlLinkExtractorStage:
    """Collects ``<a href>`` targets resolved against the page URL.

    Must run before the sanitizer, which drops navigation blocks.
    """

    async def process(self, context: ProcessingContext, proceed: Proceed) -> None:
        soup = _soup(context)
        if soup is not None:
            try:
                links: List[str] = []
                for tag in soup.find_all("a", href=True):
                    href = str(tag.get("href") or "").strip()
                    if not href or href.lower().startswith(_SKIP_HREF_PREFIXES):
                        continue
                    absolute = resolve_url(href, context.source_url)
                    if absolute:
                        links.append(absolute)
                context.add_links(links)
                logger.debug("Extracted %d links from %s", len(context.links), context.source_url)
            except Exception as exc:
                logger.error("Error extracting links from %s: %s", context.source_url, exc)
                context.errors.append(StageError(f"Failed to extract links from HTML: {exc}"))
        await proceed()


class HtmlSanitizerStage:
    """Removes boilerplate elements plus ``options.exclude_selectors``.

    A bad selector is recorded and skipped; the remaining selectors still apply.
    """

    def __init__(self, selectors: Sequence[str] = DEFAULT_REMOVE_SELECTORS) -> None:
        self.selectors = tuple(selectors)

    async def process(self, context: ProcessingContext, proceed: Proceed) -> None:
        soup = _soup(context)
        if soup is not None:
            removed = 0
            for selector in (*context.options.exclude_selectors, *self.selectors):
                try:
                    for element in soup.select(selector):
                        element.decompose()
                        removed += 1
                except Exception as exc:
                    logger.warning("Invalid selector %r for %s: %s", selector, context.source_url, exc)
                    context.errors.append(StageError(f"Invalid selector {selector!r}: {exc}"))
            logger.debug("Removed %d elements for %s", removed, context.source_url)
        await proceed()


def _code_language(el: Tag) -> str:
    language = el.get("data-language")
    if language:
        return str(language)
    candidates = [el, *el.find_all(True, class_=True), *el.find_parents(class_=True)]
    for node in candidates:
        classes = node.get("class") or []
        match = _LANGUAGE_CLASS_RE.search(" ".join(classes))
        if match:
            return match.group(1)
    return ""


class HtmlToMarkdownStage:
    """Replaces ``context.content`` with Markdown rendered from the sanitized body."""

    async def process(self, context: ProcessingContext, proceed: Proceed) -> None:
        soup = _soup(context)
        if soup is not None:
            try:
                body = soup.body or soup
                markdown = markdownify(
                    str(body),
                    heading_style=ATX,
                    bullets="-",
                    escape_underscores=False,
                    code_language_callback=_code_language,
                )
                markdown = re.sub(r"\n{3,}", "\n\n", markdown).strip()
                if not markdown:
                    logger.warning("HTML to Markdown conversion resulted in empty content for %s", context.source_url)
                context.content = markdown
                context.content_type = "text/markdown"
            except Exception as exc:
                logger.error("Error converting HTML to Markdown for %s: %s", context.source_url, exc)
                context.errors.append(StageError(f"Failed to convert HTML to Markdown: {exc}"))
        await proceed()
