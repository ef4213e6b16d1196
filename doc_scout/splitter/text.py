# doc_scout/splitter/text.py
"""
Generic text splitter on top of LangChain's ``RecursiveCharacterTextSplitter``.

Boundaries are tried from coarse to fine: paragraphs, lines, spaces, then
single characters. Separators stay inside the chunks and whitespace is not
stripped, so joining the chunks gives back the input unchanged.
"""
from __future__ import annotations

import re
from typing import List

from langchain_text_splitters import RecursiveCharacterTextSplitter

from doc_scout.errors import MinimumChunkSizeError
from doc_scout.splitter.base import Chunk, ContentSplitter, byte_length

SEPARATORS = ["\n\n", "\n", " ", ""]

_WORD_RE = re.compile(r"\S+")


class TextContentSplitter(ContentSplitter):
    def __init__(self, max_chunk_size: int) -> None:
        super().__init__(max_chunk_size)
        self._splitter = RecursiveCharacterTextSplitter(
            separators=SEPARATORS,
            keep_separator=True,
            strip_whitespace=False,
            chunk_size=max_chunk_size,
            chunk_overlap=0,
            length_function=byte_length,
        )

    def split(self, content: str) -> List[Chunk]:
        if self.fits(content):
            return [self._make_chunk(content)]
        self.check_words(content)
        return [self._make_chunk(piece) for piece in self._splitter.split_text(content)]

    def check_words(self, text: str) -> None:
        """Слово длиннее бюджета не режем по символам: это ``MinimumChunkSizeError``."""
        longest = max((byte_length(word) for word in _WORD_RE.findall(text)), default=0)
        if longest > self.max_chunk_size:
            raise MinimumChunkSizeError(longest, self.max_chunk_size)
