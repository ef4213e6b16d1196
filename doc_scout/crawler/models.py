"""
Data models shared by the DocScout fetchers, pipelines and crawler.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

if TYPE_CHECKING:
    from doc_scout.aggregator import PageResult


@dataclass(slots=True, frozen=True)
class RawContent:
    """Bytes (or text) of one fetched resource plus its declared MIME type."""

    content: Union[str, bytes]
    mime_type: str
    source_url: str
    charset: Optional[str] = None


@dataclass(slots=True, frozen=True)
class FetchOptions:
    signal: Optional[asyncio.Event] = None
    follow_redirects: bool = True
    timeout: Optional[float] = None


@dataclass(slots=True, frozen=True)
class ProcessedContent:
    """Immutable result of one pipeline run."""

    text_content: str
    metadata: Dict[str, Any]
    links: List[str]
    errors: List[Exception]


@dataclass(slots=True, frozen=True)
class FrontierEntry:
    url: str
    depth: int


class PageState(str, Enum):
    QUEUED = "queued"
    FETCHING = "fetching"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class CrawlState(str, Enum):
    RUNNING = "running"
    DRAINING = "draining"
    CANCELLED = "cancelled"
    DONE = "done"


@dataclass(slots=True)
class ScrapeProgress:
    """Snapshot passed to the progress callback after every fetch attempt."""

    completed: int
    total: int
    current_url: str
    depth: int
    max_depth: int
    max_pages: int
    page: Optional["PageResult"] = field(default=None, repr=False)
