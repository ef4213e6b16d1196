# File: doc_scout/errors.py
"""doc_scout.errors: иерархия исключений DocScout.

Ошибки уровня страницы или стадии копятся в ``errors`` результата и не
останавливают обход; фатальны только ошибки конфигурации (неверный шаблон,
недоступный seed, слишком маленький бюджет чанка).
"""
from __future__ import annotations

from typing import Any, Optional, Sequence

__all__: Sequence[str] = (
    "DocScoutError",
    "FetchError",
    "RedirectError",
    "UnsupportedContentError",
    "StageError",
    "DispatchProtocolError",
    "InvalidPatternError",
    "SplitError",
    "ChunkSizeError",
    "MinimumChunkSizeError",
    "as_error",
)


class DocScoutError(Exception):
    """Базовое исключение проекта."""


class FetchError(DocScoutError):
    """Сетевая или файловая ошибка загрузки одной страницы."""

    def __init__(self, url: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class RedirectError(FetchError):
    """3xx-ответ при выключенном ``follow_redirects``."""

    def __init__(self, url: str, location: str, status: int) -> None:
        super().__init__(url, f"Redirect from {url} to {location} (status {status})", status)
        self.location = location


class UnsupportedContentError(DocScoutError):
    """Ни один пайплайн не принимает MIME-тип страницы."""

    def __init__(self, mime_type: str, url: str) -> None:
        super().__init__(f"Unsupported content type '{mime_type}' for {url}")
        self.mime_type = mime_type
        self.url = url


class StageError(DocScoutError):
    """Ошибка стадии пайплайна."""


class DispatchProtocolError(DocScoutError):
    """Нарушен протокол диспетчера (``proceed`` вызван повторно)."""


class InvalidPatternError(DocScoutError, ValueError):
    """Синтаксически неверный glob или regex в include/exclude."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern


class SplitError(DocScoutError):
    """Базовая ошибка сплиттера."""


class ChunkSizeError(SplitError):
    def __init__(self, size: int, max_size: int, message: Optional[str] = None) -> None:
        super().__init__(message or f"Chunk size {size} exceeds maximum {max_size}")
        self.size = size
        self.max_size = max_size


class MinimumChunkSizeError(ChunkSizeError):
    """Атомарная единица (строка таблицы, член JSON, слово) не помещается в бюджет."""

    def __init__(self, size: int, max_size: int) -> None:
        super().__init__(
            size,
            max_size,
            f"Cannot split content any further. Content requires minimum chunk size of "
            f"{size} bytes, but maximum allowed is {max_size} bytes.",
        )


def as_error(value: Any) -> Exception:
    """Приводит пойманное значение к ``Exception``, сохраняя исходный текст."""
    if isinstance(value, Exception):
        return value
    return StageError(str(value))
