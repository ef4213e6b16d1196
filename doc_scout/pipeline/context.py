# doc_scout/pipeline/context.py
"""
Processing context and stage contract shared by all pipelines.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Protocol

from doc_scout.config import ScrapeOptions
from doc_scout.crawler.models import ProcessedContent
from doc_scout.utils import remove_duplicates

Proceed = Callable[[], Awaitable[None]]


@dataclass(slots=True)
class ProcessingContext:
    """Mutable record owned by exactly one pipeline invocation.

    ``content`` is rewritten in place by stages; ``document`` holds the parsed
    tree (BeautifulSoup for HTML, the decoded value for JSON) once a parser
    stage has run.
    """

    content: str
    source_url: str
    content_type: str
    options: ScrapeOptions
    metadata: Dict[str, Any] = field(default_factory=dict)
    links: List[str] = field(default_factory=list)
    errors: List[Exception] = field(default_factory=list)
    fetcher: Optional[Any] = None
    document: Any = None

    def add_links(self, links: Iterable[str]) -> None:
        """Append links keeping first-seen order and dropping duplicates."""
        self.links[:] = remove_duplicates([*self.links, *links])

    def to_processed(self) -> ProcessedContent:
        return ProcessedContent(
            text_content=self.content if isinstance(self.content, str) else "",
            metadata=dict(self.metadata),
            links=list(self.links),
            errors=list(self.errors),
        )


class Stage(Protocol):
    """One processing step.

    A stage either calls ``proceed()`` to hand control to the next stage or
    returns without calling it, which ends the run (fail-closed). Stages that
    tolerate their own failures record the error in ``context.errors`` and
    still call ``proceed()`` (fail-open).
    """

    async def process(self, context: ProcessingContext, proceed: Proceed) -> None: ...
