# doc_scout/crawler/scope.py
"""
Scope policy: decides whether a resolved link belongs to the crawl relative
to the seed URL.
"""
from __future__ import annotations

from urllib.parse import urlsplit

from doc_scout.config import CrawlScope


def base_path(path: str) -> str:
    """Seed path if it ends with ``/``, otherwise its parent directory."""
    if not path:
        return "/"
    if path.endswith("/"):
        return path
    return path[: path.rfind("/") + 1] or "/"


def registrable_domain(hostname: str) -> str:
    """Last two labels of *hostname* (``docs.example.com`` → ``example.com``)."""
    return ".".join(hostname.split(".")[-2:])


def is_in_scope(seed_url: str, target_url: str, scope: CrawlScope | str = CrawlScope.SUBPAGES) -> bool:
    """Return True if absolute *target_url* is within *scope* of *seed_url*."""
    seed = urlsplit(seed_url)
    target = urlsplit(target_url)
    if seed.scheme.lower() != target.scheme.lower():
        return False
    seed_host = (seed.hostname or "").lower()
    target_host = (target.hostname or "").lower()

    scope = CrawlScope(scope)
    if scope is CrawlScope.SUBPAGES:
        if seed_host != target_host or seed.port != target.port:
            return False
        return (target.path or "/").startswith(base_path(seed.path))
    if scope is CrawlScope.HOSTNAME:
        return seed_host == target_host
    return registrable_domain(seed_host) == registrable_domain(target_host)
