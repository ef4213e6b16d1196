# doc_scout/pipeline/base.py
"""
Base class for format pipelines: decode raw bytes, run a fixed stage list
through the dispatcher, hand back :class:`ProcessedContent`.
"""
from __future__ import annotations

from typing import Any, List, Optional

from doc_scout.config import ScrapeOptions
from doc_scout.crawler.models import ProcessedContent, RawContent
from doc_scout.pipeline.context import ProcessingContext, Stage
from doc_scout.pipeline.dispatcher import run_stages
from doc_scout.utils import decode_content


class BasePipeline:
    """Selects itself through :meth:`can_process`; subclasses provide stages."""

    def __init__(self, stages: Optional[List[Stage]] = None) -> None:
        self.stages: List[Stage] = list(stages or [])

    def can_process(self, mime_type: str) -> bool:
        raise NotImplementedError

    def stages_for(self, options: ScrapeOptions) -> List[Stage]:
        return list(self.stages)

    def build_context(
        self, raw: RawContent, options: ScrapeOptions, fetcher: Optional[Any] = None
    ) -> ProcessingContext:
        return ProcessingContext(
            content=decode_content(raw.content, raw.charset),
            source_url=raw.source_url,
            content_type=raw.mime_type,
            options=options,
            fetcher=fetcher,
        )

    async def process(
        self, raw: RawContent, options: ScrapeOptions, fetcher: Optional[Any] = None
    ) -> ProcessedContent:
        context = self.build_context(raw, options, fetcher)
        await run_stages(self.stages_for(options), context)
        return context.to_processed()

    async def close(self) -> None:
        """Release shared resources; nothing to do by default."""
