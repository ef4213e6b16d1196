# doc_scout/pipeline/stages/markdown.py
"""
Markdown stages: front matter / title metadata and link extraction.
"""
from __future__ import annotations

import logging
import re
from typing import List

import yaml

from doc_scout.errors import StageError
from doc_scout.pipeline.context import Proceed, ProcessingContext
from doc_scout.utils import resolve_url

logger = logging.getLogger("DocScout")

_FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_H1_RE = re.compile(r"^#[ \t]+(.+?)[ \t#]*$", re.MULTILINE)
_FENCE_RE = re.compile(r"^(```|~~~).*?^\1[ \t]*$", re.MULTILINE | re.DOTALL)

# [text](url "title") and ![alt](url)
_INLINE_LINK_RE = re.compile(r"!?\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+[\"'(][^)]*)?\s*\)")
_AUTOLINK_RE = re.compile(r"<((?:https?|file):[^>\s]+)>")
_REFERENCE_RE = re.compile(r"^[ ]{0,3}\[[^\]]+\]:\s*<?(\S+?)>?(?:\s+[\"'(].*)?$", re.MULTILINE)


def split_front_matter(text: str):
    """Возвращает (front matter как dict, текст без него)."""
    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return {}, text
    data = yaml.safe_load(match.group(1)) or {}
    if not isinstance(data, dict):
        raise ValueError("front matter is not a mapping")
    return data, text[match.end():]


class MarkdownMetadataStage:
    """YAML front matter into ``metadata``; title from front matter or the first ``# `` heading."""

    async def process(self, context: ProcessingContext, proceed: Proceed) -> None:
        body = context.content
        try:
            front, body = split_front_matter(context.content)
            for key, value in front.items():
                context.metadata[str(key)] = value
        except (yaml.YAMLError, ValueError) as exc:
            logger.warning("Invalid front matter in %s: %s", context.source_url, exc)
            context.errors.append(StageError(f"Failed to parse front matter: {exc}"))

        if not context.metadata.get("title"):
            match = _H1_RE.search(_FENCE_RE.sub("", body))
            context.metadata["title"] = match.group(1).strip() if match else "Untitled"
        else:
            context.metadata["title"] = str(context.metadata["title"])
        await proceed()


class MarkdownLinkExtractorStage:
    """Inline, autolink and reference-style links, resolved against the source URL."""

    async def process(self, context: ProcessingContext, proceed: Proceed) -> None:
        text = _FENCE_RE.sub("", context.content)
        found: List[str] = []
        for regex in (_INLINE_LINK_RE, _AUTOLINK_RE, _REFERENCE_RE):
            found.extend(m.group(1) for m in regex.finditer(text))

        links = []
        for href in found:
            if href.startswith("#") or href.lower().startswith(("mailto:", "javascript:")):
                continue
            absolute = resolve_url(href, context.source_url)
            if absolute:
                links.append(absolute)
        context.add_links(links)
        logger.debug("Extracted %d links from %s", len(context.links), context.source_url)
        await proceed()
