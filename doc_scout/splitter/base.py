# doc_scout/splitter/base.py
"""
Общие типы сплиттеров: чанк и базовый класс с бюджетом в байтах UTF-8.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from doc_scout.errors import ChunkSizeError


def byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


@dataclass(frozen=True, slots=True)
class Chunk:
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return byte_length(self.content)


class ContentSplitter:
    """Сплиттер без состояния: ``split`` можно вызывать повторно с тем же результатом."""

    def __init__(self, max_chunk_size: int) -> None:
        if max_chunk_size < 1:
            raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")
        self.max_chunk_size = max_chunk_size

    def split(self, content: str) -> List[Chunk]:
        raise NotImplementedError

    def fits(self, text: str) -> bool:
        return byte_length(text) <= self.max_chunk_size

    def _make_chunk(self, content: str, **metadata: Any) -> Chunk:
        size = byte_length(content)
        if size > self.max_chunk_size:
            raise ChunkSizeError(size, self.max_chunk_size)
        return Chunk(content, dict(metadata))
