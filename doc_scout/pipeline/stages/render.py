# doc_scout/pipeline/stages/render.py
"""
Headless rendering for script-driven pages (Playwright, Chromium).

The already-fetched HTML is served to the browser through request
interception, so rendering never costs a second download of the page itself.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional
from urllib.parse import urlsplit

from playwright.async_api import Browser, Playwright, Route, async_playwright

from doc_scout.config import ScrapeMode
from doc_scout.errors import StageError
from doc_scout.pipeline.context import Proceed, ProcessingContext
from doc_scout.utils import is_html

logger = logging.getLogger("DocScout")

_BLOCKED_RESOURCES = frozenset({"image", "font", "media", "stylesheet"})


class BrowserManager:
    """Один браузер на конвейер: запуск лениво и строго один раз."""

    def __init__(self, headless: bool = True) -> None:
        self.headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def started(self) -> bool:
        return self._browser is not None

    async def get_browser(self) -> Browser:
        async with self._lock:
            if self._browser is None or not self._browser.is_connected():
                logger.debug("Launching headless Chromium")
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(headless=self.headless)
            return self._browser

    async def close(self) -> None:
        async with self._lock:
            if self._browser is not None:
                await self._browser.close()
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None


class PlaywrightRenderStage:
    """Replaces the static HTML with the DOM after scripts have run.

    Fail-open. In ``auto`` mode a rendering failure is only logged and the
    static HTML goes on unchanged; in ``playwright`` mode it is also recorded.
    """

    def __init__(self, browsers: BrowserManager) -> None:
        self.browsers = browsers

    async def process(self, context: ProcessingContext, proceed: Proceed) -> None:
        if is_html(context.content_type) and urlsplit(context.source_url).scheme in ("http", "https"):
            try:
                context.content = await self._render(context)
            except Exception as exc:
                logger.warning("Rendering failed for %s: %s", context.source_url, exc)
                if context.options.scrape_mode == ScrapeMode.PLAYWRIGHT.value:
                    context.errors.append(StageError(f"Playwright rendering failed: {exc}"))
        await proceed()

    async def _render(self, context: ProcessingContext) -> str:
        browser = await self.browsers.get_browser()
        page = await browser.new_page(user_agent=context.options.user_agent)
        html = context.content

        async def handle(route: Route) -> None:
            request = route.request
            if request.resource_type == "document" and request.url.rstrip("/") == context.source_url.rstrip("/"):
                await route.fulfill(status=200, content_type="text/html; charset=utf-8", body=html)
            elif request.resource_type in _BLOCKED_RESOURCES:
                await route.abort()
            else:
                await route.continue_()

        try:
            await page.route("**/*", handle)
            await page.goto(
                context.source_url,
                wait_until="load",
                timeout=context.options.timeout * 1000,
            )
            return await page.content()
        finally:
            await page.close()
