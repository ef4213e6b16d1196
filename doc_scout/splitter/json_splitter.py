# doc_scout/splitter/json_splitter.py
"""
JSON splitter.

Arrays are cut into ordered sub-arrays, objects into objects holding
consecutive keys. Each chunk is compact JSON that parses on its own; a member
too large to fit inside its brackets stops the split with
:class:`MinimumChunkSizeError`.
"""
from __future__ import annotations

import json
import logging
from typing import Any, List

from doc_scout.errors import MinimumChunkSizeError
from doc_scout.splitter.base import Chunk, ContentSplitter, byte_length
from doc_scout.splitter.text import TextContentSplitter

logger = logging.getLogger("DocScout")


def dump_compact(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


class JsonContentSplitter(ContentSplitter):
    def split(self, content: str) -> List[Chunk]:
        if self.fits(content):
            return [self._make_chunk(content)]
        try:
            root = json.loads(content)
        except ValueError:
            logger.debug("Content is not valid JSON, falling back to text splitting")
            return TextContentSplitter(self.max_chunk_size).split(content)

        if isinstance(root, list):
            members = [dump_compact(item) for item in root]
            return self._pack(members, "[", "]", kind="array")
        if isinstance(root, dict):
            members = [f"{dump_compact(str(key))}:{dump_compact(value)}" for key, value in root.items()]
            return self._pack(members, "{", "}", kind="object")

        text = dump_compact(root)
        if self.fits(text):
            return [self._make_chunk(text, type="scalar")]
        raise MinimumChunkSizeError(byte_length(text), self.max_chunk_size)

    def _pack(self, members: List[str], open_: str, close: str, kind: str) -> List[Chunk]:
        if not members:
            return [self._make_chunk(open_ + close, type=kind)]
        budget = self.max_chunk_size - 2
        chunks: List[Chunk] = []
        current: List[str] = []
        current_size = 0
        for member in members:
            size = byte_length(member)
            if size > budget:
                raise MinimumChunkSizeError(size + 2, self.max_chunk_size)
            extra = size + (1 if current else 0)
            if current and current_size + extra > budget:
                chunks.append(self._make_chunk(open_ + ",".join(current) + close, type=kind))
                current, current_size, extra = [], 0, size
            current.append(member)
            current_size += extra
        chunks.append(self._make_chunk(open_ + ",".join(current) + close, type=kind))
        return chunks
