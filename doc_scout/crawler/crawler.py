# === FILE: doc_scout/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Sequence, Set, Union
from urllib.parse import urldefrag, urlsplit

from doc_scout.aggregator import PageResult, ScrapeReport, aggregate_results
from doc_scout.config import ScrapeOptions
from doc_scout.crawler.fetcher import Fetcher
from doc_scout.crawler.models import (
    CrawlState,
    FetchOptions,
    FrontierEntry,
    PageState,
    ScrapeProgress,
)
from doc_scout.crawler.patterns import PatternFilter
from doc_scout.crawler.scope import is_in_scope
from doc_scout.errors import UnsupportedContentError, as_error
from doc_scout.logger import page_logger
from doc_scout.pipeline import BasePipeline, default_pipelines, select_pipeline
from doc_scout.utils import normalize_url, resolve_url

__all__ = ("AsyncCrawler", "ProgressCallback")

ProgressCallback = Callable[[ScrapeProgress], Union[None, Awaitable[None]]]


class AsyncCrawler:
    """
    Обход от seed URL: пул не более ``max_concurrency`` задач, дедупликация по
    нормализованному URL, фильтры области и шаблонов, лимиты глубины и страниц.

    Единственное фатальное событие во время обхода: ошибка загрузки seed.
    Все прочие ошибки записываются в ``errors`` соответствующей страницы.
    """

    def __init__(
        self,
        options: ScrapeOptions,
        fetcher: Fetcher,
        pipelines: Optional[Sequence[BasePipeline]] = None,
    ) -> None:
        self.options = options
        self.fetcher = fetcher
        self.pipelines: List[BasePipeline] = list(pipelines) if pipelines is not None else default_pipelines()
        # bad patterns fail here, before anything is fetched
        self.patterns = PatternFilter(options.include_patterns, options.exclude_patterns)
        self._folder_patterns = PatternFilter(None, options.exclude_patterns)
        self.logger = logging.getLogger("DocScout")
        self.visited: Set[str] = set()
        self.frontier: Deque[FrontierEntry] = deque()
        self.pages: List[PageResult] = []
        self.fetched = 0
        self.state = CrawlState.RUNNING

    async def scrape(
        self,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ScrapeReport:
        cancel = cancel_event or asyncio.Event()
        seed = urldefrag(self.options.url).url
        self.visited = {normalize_url(seed)}
        self.frontier = deque([FrontierEntry(seed, 0)])
        self.pages = []
        self.fetched = 0
        self._set_state(CrawlState.RUNNING)

        self.logger.info("Старт обхода: %s (scope=%s)", seed, self.options.scope)
        start = time.monotonic()
        in_flight: Dict[asyncio.Task[None], FrontierEntry] = {}
        try:
            while True:
                while self._can_admit(len(in_flight), cancel):
                    entry = self.frontier.popleft()
                    task = asyncio.create_task(self._process_entry(entry, cancel, on_progress))
                    in_flight[task] = entry
                if self._limit_reached(len(in_flight), cancel):
                    self._set_state(CrawlState.DRAINING)
                if not in_flight:
                    break
                done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    in_flight.pop(task)
                    task.result()
        except BaseException:
            for task in in_flight:
                task.cancel()
            await asyncio.gather(*in_flight, return_exceptions=True)
            raise
        finally:
            await self._close_pipelines()

        self._set_state(CrawlState.CANCELLED if cancel.is_set() else CrawlState.DONE)
        duration = time.monotonic() - start
        self.logger.info(
            "Завершено: %d загружено, %d страниц за %.2f с (найдено URL: %d)",
            self.fetched, len(self.pages), duration, len(self.visited),
        )
        return aggregate_results(
            self.pages, fetched=self.fetched, discovered=len(self.visited), state=self.state
        )

    def _can_admit(self, in_flight: int, cancel: asyncio.Event) -> bool:
        return (
            bool(self.frontier)
            and not cancel.is_set()
            and in_flight < self.options.max_concurrency
            and self.fetched + in_flight < self.options.max_pages
        )

    def _limit_reached(self, in_flight: int, cancel: asyncio.Event) -> bool:
        return (
            self.state == CrawlState.RUNNING
            and bool(self.frontier)
            and not cancel.is_set()
            and self.fetched + in_flight >= self.options.max_pages
        )

    def _set_state(self, state: CrawlState) -> None:
        if state != self.state:
            self.logger.debug("Crawl state: %s -> %s", self.state.value, state.value)
        self.state = state

    async def _process_entry(
        self,
        entry: FrontierEntry,
        cancel: asyncio.Event,
        on_progress: Optional[ProgressCallback],
    ) -> None:
        page = PageResult(url=entry.url, depth=entry.depth, state=PageState.FETCHING)
        log = page_logger(entry.url, entry.depth)
        log.debug("Fetching")
        fetch_options = FetchOptions(
            signal=cancel,
            follow_redirects=self.options.follow_redirects,
            timeout=self.options.timeout,
        )
        try:
            raw = await self.fetcher.fetch(entry.url, fetch_options)
        except Exception as exc:
            if entry.depth == 0 and not cancel.is_set():
                log.error("Seed could not be fetched: %s", exc)
                raise
            log.warning("Failed to fetch: %s", exc)
            page.state = PageState.FAILED
            page.errors.append(as_error(exc))
            self.pages.append(page)
            await self._report(on_progress, page)
            return

        self.fetched += 1
        page.state = PageState.PROCESSING
        pipeline = select_pipeline(self.pipelines, raw.mime_type)
        if pipeline is None:
            log.warning("Unsupported content type %s", raw.mime_type)
            page.state = PageState.FAILED
            page.errors.append(UnsupportedContentError(raw.mime_type, entry.url))
        else:
            try:
                processed = await pipeline.process(raw, self.options, self.fetcher)
            except Exception as exc:
                log.error("Pipeline %s failed: %s", type(pipeline).__name__, exc)
                page.state = PageState.FAILED
                page.errors.append(as_error(exc))
            else:
                page = PageResult.from_processed(entry.url, entry.depth, processed)
                for error in page.errors:
                    log.debug("Processing error: %s", error)
                added = self._enqueue_links(page)
                log.debug("%d links, %d queued", len(page.links), added)

        self.pages.append(page)
        await self._report(on_progress, page)

    def _enqueue_links(self, page: PageResult) -> int:
        """Фильтрует ссылки и ставит новые в очередь; без await, то есть атомарно."""
        next_depth = page.depth + 1
        if next_depth > self.options.max_depth:
            return 0
        added = 0
        for link in page.links:
            absolute = resolve_url(link, page.url)
            if not absolute:
                continue
            if urlsplit(absolute).scheme.lower() not in self.options.allowed_schemes:
                continue
            key = normalize_url(absolute)
            if key in self.visited:
                continue
            if not is_in_scope(self.options.url, absolute, self.options.scope):
                continue
            if not self._passes_patterns(absolute):
                continue
            self.visited.add(key)
            self.frontier.append(FrontierEntry(absolute, next_depth))
            added += 1
        return added

    def _passes_patterns(self, url: str) -> bool:
        # local folders are walked even when include patterns name only files
        if url.startswith("file:") and url.endswith("/"):
            return self._folder_patterns.should_include(url)
        return self.patterns.should_include(url)

    async def _report(self, on_progress: Optional[ProgressCallback], page: PageResult) -> None:
        if on_progress is None:
            return
        progress = ScrapeProgress(
            completed=self.fetched,
            total=len(self.visited),
            current_url=page.url,
            depth=page.depth,
            max_depth=self.options.max_depth,
            max_pages=self.options.max_pages,
            page=page,
        )
        result: Any = on_progress(progress)
        if inspect.isawaitable(result):
            await result

    async def _close_pipelines(self) -> None:
        results = await asyncio.gather(*(p.close() for p in self.pipelines), return_exceptions=True)
        for pipeline, result in zip(self.pipelines, results):
            if isinstance(result, Exception):
                self.logger.warning("Error closing %s: %s", type(pipeline).__name__, result)
