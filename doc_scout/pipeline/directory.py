# doc_scout/pipeline/directory.py
"""
Local folder listings (``inode/directory``) become plain link lists, so a
``file:`` seed pointing at a folder crawls the tree below it.
"""
from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import unquote, urlsplit

from doc_scout.pipeline.base import BasePipeline
from doc_scout.pipeline.context import Proceed, ProcessingContext
from doc_scout.utils import is_directory, resolve_url


class DirectoryListingStage:
    async def process(self, context: ProcessingContext, proceed: Proceed) -> None:
        entries = [line.strip() for line in context.content.splitlines() if line.strip()]
        links = [resolve_url(entry, context.source_url) for entry in entries]
        context.add_links(link for link in links if link)
        name = PurePosixPath(unquote(urlsplit(context.source_url).path)).name
        context.metadata["title"] = name or context.source_url
        context.metadata["entries"] = len(entries)
        context.content = "\n".join(entries)
        await proceed()


class DirectoryPipeline(BasePipeline):
    def __init__(self) -> None:
        super().__init__([DirectoryListingStage()])

    def can_process(self, mime_type: str) -> bool:
        return is_directory(mime_type)
