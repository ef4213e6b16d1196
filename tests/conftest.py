# File: tests/conftest.py
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Dict, List, Optional, Tuple, Union

import pytest
from aiohttp import web

from doc_scout.config import ScrapeOptions
from doc_scout.crawler.models import FetchOptions, RawContent
from doc_scout.errors import FetchError

Page = Union[Tuple[str, str], Exception]


class FakeFetcher:
    """
    In-memory fetcher: ``pages`` maps URL -> (body, mime type) or an exception.
    Unknown URLs fail like a 404. Records calls and the peak number of
    concurrent fetches.
    """

    def __init__(self, pages: Dict[str, Page], delay: float = 0.0) -> None:
        self.pages = pages
        self.delay = delay
        self.calls: List[str] = []
        self.options: List[FetchOptions] = []
        self.active = 0
        self.peak = 0

    def can_fetch(self, url: str) -> bool:
        return True

    async def fetch(self, url: str, options: Optional[FetchOptions] = None) -> RawContent:
        self.calls.append(url)
        self.options.append(options or FetchOptions())
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            if self.delay:
                signal = options.signal if options else None
                if signal is None:
                    await asyncio.sleep(self.delay)
                else:
                    try:
                        await asyncio.wait_for(signal.wait(), timeout=self.delay)
                    except asyncio.TimeoutError:
                        pass
                    else:
                        raise FetchError(url, f"Fetch aborted: {url}")
            page = self.pages.get(url)
            if page is None:
                raise FetchError(url, f"Failed to fetch {url}: HTTP 404", 404)
            if isinstance(page, Exception):
                raise page
            body, mime = page
            return RawContent(content=body.encode("utf-8"), mime_type=mime, source_url=url, charset="utf-8")
        finally:
            self.active -= 1


def html_page(*links: str, title: str = "Page", body: str = "") -> Tuple[str, str]:
    anchors = "".join(f'<a href="{href}">{href}</a>' for href in links)
    return (
        f"<html><head><title>{title}</title></head><body><main>{body}{anchors}</main></body></html>",
        "text/html",
    )


@pytest.fixture()
def make_options():
    def factory(url: str = "https://example.com/docs/", **kwargs) -> ScrapeOptions:
        kwargs.setdefault("retry_times", 0)
        kwargs.setdefault("retry_delay", 0.0)
        return ScrapeOptions(url=url, **kwargs)

    return factory


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()
