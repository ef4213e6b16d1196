# File: doc_scout/utils.py
"""doc_scout.utils: Утилиты для URL, MIME-типов и декодирования содержимого."""

from __future__ import annotations

import re
from typing import Collection, List, Optional, Sequence, Tuple, Union
from urllib.parse import urldefrag, urljoin, urlsplit, urlunsplit

from bs4 import UnicodeDammit

from doc_scout.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "resolve_url",
    "parse_content_type",
    "is_html",
    "is_markdown",
    "is_text",
    "is_json",
    "is_directory",
    "decode_content",
    "remove_duplicates",
)

DIRECTORY_MIME = "inode/directory"

_INDEX_RE = re.compile(r"/index\.(html|htm|asp|php|jsp)$", re.IGNORECASE)


def normalize_url(url: str) -> str:
    """Ключ для VisitedSet: схема и хост в нижнем регистре, без фрагмента,
    без ``index.html`` и завершающего слеша. Query сохраняется."""
    parts = urlsplit(url)
    path = _INDEX_RE.sub("/", parts.path) or "/"
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    normalized = urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, ""))
    logger.debug("Normalized URL: %s -> %s", url, normalized)
    return normalized


def resolve_url(href: str, base_url: str) -> Optional[str]:
    """Разрешает ссылку относительно страницы и отбрасывает фрагмент.
    Возвращает ``None`` для синтаксически негодных ссылок."""
    try:
        absolute = urljoin(base_url, href.strip())
        # urlsplit raises on malformed netlocs such as unbalanced IPv6 brackets
        urlsplit(absolute).port
    except ValueError:
        logger.debug("Ignoring invalid URL syntax: %s", href)
        return None
    return urldefrag(absolute).url


def parse_content_type(header: Optional[str]) -> Tuple[str, Optional[str]]:
    """Разбирает заголовок Content-Type на (mime_type, charset)."""
    if not header:
        return "application/octet-stream", None
    parts = [p.strip() for p in header.split(";")]
    mime_type = parts[0].lower()
    charset = None
    for param in parts[1:]:
        if param.lower().startswith("charset="):
            charset = param[len("charset="):].strip("\"'").lower()
            break
    return mime_type, charset


def is_html(mime_type: str) -> bool:
    return mime_type in ("text/html", "application/xhtml+xml")


def is_markdown(mime_type: str) -> bool:
    return mime_type in ("text/markdown", "text/x-markdown")


def is_text(mime_type: str) -> bool:
    return mime_type.startswith("text/")


def is_json(mime_type: str) -> bool:
    return mime_type in (
        "application/json",
        "application/ld+json",
        "application/json5",
        "text/json",
    ) or mime_type.endswith("+json")


def is_directory(mime_type: str) -> bool:
    return mime_type == DIRECTORY_MIME


def decode_content(content: Union[str, bytes], charset: Optional[str] = None) -> str:
    """Байты → строка: объявленная кодировка, иначе определение через
    UnicodeDammit (BOM, <meta charset>), иначе UTF-8 с заменой."""
    if isinstance(content, str):
        return content
    if charset:
        try:
            return content.decode(charset)
        except (LookupError, UnicodeDecodeError) as exc:
            logger.warning("Cannot decode content as %s (%s), detecting encoding", charset, exc)
    dammit = UnicodeDammit(content, ["utf-8"])
    if dammit.unicode_markup is not None:
        return dammit.unicode_markup
    return content.decode("utf-8", errors="replace")


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
