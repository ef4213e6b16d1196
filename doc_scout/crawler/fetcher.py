# doc_scout/crawler/fetcher.py
"""
Fetcher module: HTTP and local-file transports for the crawler.

Every fetcher honours :class:`FetchOptions`: the cancellation event aborts an
in-flight request, ``follow_redirects`` and ``timeout`` are passed down to the
transport. Retries with backoff live here, never in the crawler.
"""
from __future__ import annotations

import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Any, Awaitable, Optional, Protocol, Sequence, TypeVar
from urllib.parse import unquote, urlsplit

from aiohttp import ClientError, ClientSession, ClientTimeout

from doc_scout.config import ScrapeOptions
from doc_scout.crawler.models import FetchOptions, RawContent
from doc_scout.errors import FetchError, RedirectError
from doc_scout.utils import DIRECTORY_MIME, parse_content_type

__all__ = ("Fetcher", "HttpFetcher", "FileFetcher", "AutoFetcher")

logger = logging.getLogger("DocScout")

T = TypeVar("T")


class Fetcher(Protocol):
    def can_fetch(self, url: str) -> bool: ...

    async def fetch(self, url: str, options: Optional[FetchOptions] = None) -> RawContent: ...


async def _abortable(url: str, work: Awaitable[T], signal: Optional[asyncio.Event]) -> T:
    """Run *work* until it finishes or *signal* is set, whichever comes first."""
    if signal is None:
        return await work
    if signal.is_set():
        if asyncio.iscoroutine(work):
            work.close()
        raise FetchError(url, f"Fetch aborted: {url}")
    task = asyncio.ensure_future(work)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()
    if task in done:
        return task.result()
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise FetchError(url, f"Fetch aborted: {url}")


class HttpFetcher:
    """Handles HTTP fetching with retries/backoff, redirects policy and timeout."""

    RETRY_STATUS: Sequence[int] = (408, 429, 500, 502, 503, 504, 525)

    def __init__(
        self,
        *,
        user_agent: str = "DocScoutBot/1.0",
        timeout: float = 30.0,
        retry_times: int = 3,
        retry_delay: float = 1.0,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.user_agent = user_agent
        self.timeout = timeout
        self.retry_times = retry_times
        self.retry_delay = retry_delay
        self.session = session
        self._owns_session = session is None

    @classmethod
    def from_options(cls, options: ScrapeOptions) -> HttpFetcher:
        return cls(
            user_agent=options.user_agent,
            timeout=options.timeout,
            retry_times=options.retry_times,
            retry_delay=options.retry_delay,
        )

    async def __aenter__(self) -> HttpFetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.timeout),
                headers={"User-Agent": self.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
        if self._owns_session:
            self.session = None

    def can_fetch(self, url: str) -> bool:
        return urlsplit(url).scheme.lower() in ("http", "https")

    async def fetch(self, url: str, options: Optional[FetchOptions] = None) -> RawContent:
        """Fetch *url*; raises :class:`FetchError` once retries are exhausted."""
        options = options or FetchOptions()
        if not self.session:
            raise RuntimeError("Session not initialized")
        return await _abortable(url, self._fetch_with_retry(url, options), options.signal)

    async def _fetch_with_retry(self, url: str, options: FetchOptions) -> RawContent:
        attempts = 0
        while True:
            try:
                return await self._request(url, options)
            except (ClientError, asyncio.TimeoutError, _RetryableStatus) as exc:
                attempts += 1
                status = exc.status if isinstance(exc, _RetryableStatus) else None
                if attempts > self.retry_times:
                    logger.warning("Failed %s: %s", url, exc)
                    raise FetchError(
                        url,
                        f"Failed to fetch {url} after {attempts} attempts: {str(exc) or type(exc).__name__}",
                        status,
                    ) from exc
                # exponential backoff, cap at 60s
                backoff = min(self.retry_delay * 2 ** (attempts - 1), 60)
                logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.retry_times, url, backoff)
                await asyncio.sleep(backoff)

    async def _request(self, url: str, options: FetchOptions) -> RawContent:
        if self.session is None:
            raise RuntimeError("Session not initialized")
        kwargs: dict[str, Any] = {"allow_redirects": options.follow_redirects}
        if options.timeout is not None:
            kwargs["timeout"] = ClientTimeout(total=options.timeout)
        async with self.session.get(url, **kwargs) as resp:
            status = resp.status
            if 300 <= status < 400 and not options.follow_redirects:
                location = resp.headers.get("Location")
                if location:
                    raise RedirectError(url, location, status)
            if status in self.RETRY_STATUS:
                raise _RetryableStatus(status)
            if status >= 400:
                raise FetchError(url, f"Failed to fetch {url}: HTTP {status}", status)
            mime_type, charset = parse_content_type(resp.headers.get("Content-Type"))
            data = await resp.read()
            return RawContent(content=data, mime_type=mime_type, source_url=url, charset=charset)


class _RetryableStatus(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(f"Retryable status {status}")
        self.status = status


class FileFetcher:
    """Reads ``file:`` URLs; folders come back as ``inode/directory`` listings."""

    _TEXT_TYPES = {
        ".html": "text/html",
        ".htm": "text/html",
        ".htmx": "text/html",
        ".md": "text/markdown",
        ".mdx": "text/markdown",
        ".markdown": "text/markdown",
        ".txt": "text/plain",
        ".text": "text/plain",
        ".json": "application/json",
        ".rst": "text/x-rst",
    }

    def can_fetch(self, url: str) -> bool:
        return url.startswith("file:")

    @staticmethod
    def to_path(url: str) -> Path:
        return Path(unquote(urlsplit(url).path))

    async def fetch(self, url: str, options: Optional[FetchOptions] = None) -> RawContent:
        options = options or FetchOptions()
        path = self.to_path(url)
        logger.debug("Fetching file: %s", path)
        try:
            return await _abortable(url, asyncio.to_thread(self._read, url, path), options.signal)
        except OSError as exc:
            raise FetchError(url, f"Failed to read file {path}: {exc}") from exc

    def _read(self, url: str, path: Path) -> RawContent:
        if path.is_dir():
            entries = sorted(path.iterdir(), key=lambda p: p.name)
            listing = "\n".join(child.as_uri() + ("/" if child.is_dir() else "") for child in entries)
            return RawContent(content=listing, mime_type=DIRECTORY_MIME, source_url=url, charset="utf-8")
        data = path.read_bytes()
        return RawContent(content=data, mime_type=self.guess_mime_type(path, data), source_url=url)

    def guess_mime_type(self, path: Path, data: bytes = b"") -> str:
        ext = path.suffix.lower()
        if ext in self._TEXT_TYPES:
            return self._TEXT_TYPES[ext]
        guessed, _ = mimetypes.guess_type(path.name)
        if guessed:
            return guessed
        # null byte in the head means binary
        if b"\x00" in data[:8000]:
            return "application/octet-stream"
        return "text/plain" if data else "application/octet-stream"


class AutoFetcher:
    """Routes each URL to the first fetcher that accepts its scheme."""

    def __init__(self, *fetchers: Fetcher) -> None:
        self.fetchers = list(fetchers)

    def can_fetch(self, url: str) -> bool:
        return any(f.can_fetch(url) for f in self.fetchers)

    async def fetch(self, url: str, options: Optional[FetchOptions] = None) -> RawContent:
        for fetcher in self.fetchers:
            if fetcher.can_fetch(url):
                return await fetcher.fetch(url, options)
        raise FetchError(url, f"No fetcher can handle {url}")
