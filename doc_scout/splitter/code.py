# doc_scout/splitter/code.py
from __future__ import annotations

from typing import List, Optional

from doc_scout.errors import MinimumChunkSizeError
from doc_scout.splitter.base import Chunk, ContentSplitter, byte_length


class CodeContentSplitter(ContentSplitter):
    """Режет код по строкам; каждый чанк обернут в ```-блок с языком."""

    def __init__(self, max_chunk_size: int, language: Optional[str] = None) -> None:
        super().__init__(max_chunk_size)
        self.language = language or ""

    def wrap(self, body: str) -> str:
        return f"```{self.language}\n{body.rstrip(chr(10))}\n```"

    def split(self, content: str) -> List[Chunk]:
        lines = content.split("\n")
        overhead = byte_length(self.wrap(""))
        for line in lines:
            if overhead + byte_length(line) > self.max_chunk_size:
                raise MinimumChunkSizeError(overhead + byte_length(line), self.max_chunk_size)

        chunks: List[Chunk] = []
        current: List[str] = []
        for line in lines:
            if current and byte_length(self.wrap("\n".join([*current, line]))) > self.max_chunk_size:
                chunks.append(self._make_chunk(self.wrap("\n".join(current)), language=self.language))
                current = []
            current.append(line)
        chunks.append(self._make_chunk(self.wrap("\n".join(current)), language=self.language))
        return chunks
