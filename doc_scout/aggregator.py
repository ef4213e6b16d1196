# File: doc_scout/aggregator.py
"""doc_scout.aggregator: Результаты обхода: страницы и сводный отчёт."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TypedDict

from doc_scout.crawler.models import CrawlState, PageState, ProcessedContent


class PageInfo(TypedDict):
    """Сериализуемое представление одной страницы."""

    url: str
    title: str
    content: str
    links: List[str]
    metadata: Dict[str, Any]
    errors: List[str]
    depth: int
    state: str


@dataclass(slots=True)
class PageResult:
    """Итог обработки одного URL: успешный, частично успешный или провальный."""

    url: str
    depth: int
    title: str = ""
    content: str = ""
    links: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    errors: List[Exception] = field(default_factory=list)
    state: PageState = PageState.QUEUED

    @classmethod
    def from_processed(cls, url: str, depth: int, processed: ProcessedContent) -> PageResult:
        title = processed.metadata.get("title")
        return cls(
            url=url,
            depth=depth,
            title=title if isinstance(title, str) else "Untitled",
            content=processed.text_content,
            links=list(processed.links),
            metadata=dict(processed.metadata),
            errors=list(processed.errors),
            state=PageState.COMPLETED,
        )

    def to_dict(self) -> PageInfo:
        return {
            "url": self.url,
            "title": self.title,
            "content": self.content,
            "links": self.links,
            "metadata": self.metadata,
            "errors": [str(e) for e in self.errors],
            "depth": self.depth,
            "state": PageState(self.state).value,
        }


@dataclass(slots=True)
class ScrapeReport:
    """Сводный результат обхода: страницы в порядке завершения и счётчики."""

    pages: List[PageResult] = field(default_factory=list)
    fetched: int = 0
    failed: int = 0
    discovered: int = 0
    state: CrawlState = CrawlState.DONE

    @property
    def completed_pages(self) -> List[PageResult]:
        return [p for p in self.pages if p.state == PageState.COMPLETED]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pages": [p.to_dict() for p in self.pages],
            "fetched": self.fetched,
            "failed": self.failed,
            "discovered": self.discovered,
            "state": CrawlState(self.state).value,
        }

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None, default=str)


def aggregate_results(
    pages: List[PageResult],
    *,
    fetched: int,
    discovered: int = 0,
    state: Optional[CrawlState] = None,
) -> ScrapeReport:
    """Собирает страницы в ScrapeReport; ``fetched`` (успешные загрузки) считает crawler."""
    report = ScrapeReport(pages=list(pages), fetched=fetched, discovered=discovered)
    report.failed = sum(1 for p in pages if p.state == PageState.FAILED)
    if state is not None:
        report.state = state
    return report


__all__ = ["PageInfo", "PageResult", "ScrapeReport", "aggregate_results"]
