# File: doc_scout/engine.py
"""doc_scout.engine: Orchestration layer для запуска обхода и сборки отчёта."""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from doc_scout.aggregator import ScrapeReport
from doc_scout.config import ScrapeOptions, load_config
from doc_scout.crawler.crawler import AsyncCrawler, ProgressCallback
from doc_scout.crawler.fetcher import AutoFetcher, FileFetcher, HttpFetcher
from doc_scout.logger import logger
from doc_scout.pipeline import BasePipeline

__all__ = ["Engine", "start_scan"]


async def start_scan(
    options: ScrapeOptions,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[asyncio.Event] = None,
    pipelines: Optional[Sequence[BasePipeline]] = None,
) -> ScrapeReport:
    """Собирает HTTP- и файловый fetcher за AutoFetcher и запускает AsyncCrawler."""
    logger.info("Starting scrape of %s", options.url)
    async with HttpFetcher.from_options(options) as http:
        fetcher = AutoFetcher(http, FileFetcher())
        crawler = AsyncCrawler(options, fetcher, pipelines)
        return await crawler.scrape(on_progress=on_progress, cancel_event=cancel_event)


class Engine:
    """Синхронный фасад для скриптов: загрузка конфига, запуск обхода с таймаутом."""

    @staticmethod
    def load_config(path: Optional[str], **overrides) -> ScrapeOptions:
        return load_config(path, **overrides)

    def __init__(self, options: ScrapeOptions) -> None:
        self.options = options

    def start_scan(self, timeout: Optional[float] = None) -> ScrapeReport:
        """Запускает обход в новом event loop; ``timeout`` ограничивает весь обход."""
        try:
            return asyncio.run(asyncio.wait_for(start_scan(self.options), timeout=timeout))
        except asyncio.TimeoutError:
            logger.error("Scrape did not finish within %s seconds", timeout)
            raise
        except Exception as exc:
            logger.error("Scrape failed: %s", exc)
            raise
