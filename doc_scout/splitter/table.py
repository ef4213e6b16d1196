# doc_scout/splitter/table.py
"""
Markdown table splitter: every chunk repeats the header row and a
``|---|`` separator, rows are never cut.

The table ends at the first blank line or the first line without a ``|``.
Whatever follows it is plain text and goes through the text splitter.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from doc_scout.errors import MinimumChunkSizeError
from doc_scout.splitter.base import Chunk, ContentSplitter, byte_length
from doc_scout.splitter.text import TextContentSplitter

_CELL_SPLIT_RE = re.compile(r"(?<!\\)\|")
_SEPARATOR_RE = re.compile(r"^\|?\s*:?-+:?\s*(\|\s*:?-+:?\s*)*\|?\s*$")


@dataclass(slots=True)
class ParsedTable:
    header: str
    headers: List[str]
    rows: List[str]
    # text after the last row, starting with the newline that ends it
    rest: str = ""

    @property
    def separator(self) -> str:
        return "|" + "---|" * len(self.headers)

    @property
    def decoration(self) -> str:
        return f"{self.header}\n{self.separator}\n"


def split_cells(row: str) -> List[str]:
    cells = [cell.strip() for cell in _CELL_SPLIT_RE.split(row.strip())]
    if cells and cells[0] == "":
        cells = cells[1:]
    if cells and cells[-1] == "":
        cells = cells[:-1]
    return cells


def table_end(lines: Sequence[str], start: int = 0) -> int:
    """Индекс строки после таблицы, начинающейся в ``lines[start]``; ``start`` если таблицы нет.

    Строки могут быть как с завершающим ``\\n``, так и без него.
    """
    if start + 1 >= len(lines):
        return start
    header, separator = lines[start], lines[start + 1]
    if "|" not in header or not split_cells(header):
        return start
    if "|" not in separator or not _SEPARATOR_RE.match(separator):
        return start
    end = start + 2
    while end < len(lines) and lines[end].strip() and "|" in lines[end]:
        end += 1
    return end


def parse_table(content: str) -> Optional[ParsedTable]:
    """``None`` если текст не начинается с Markdown-таблицы (заголовок + разделитель)."""
    lines = content.split("\n")
    end = table_end(lines)
    if end == 0:
        return None
    rest = "\n" + "\n".join(lines[end:]) if end < len(lines) else ""
    return ParsedTable(header=lines[0], headers=split_cells(lines[0]), rows=lines[2:end], rest=rest)


class TableContentSplitter(ContentSplitter):
    def split(self, content: str) -> List[Chunk]:
        if not content:
            return [self._make_chunk("")]
        table = parse_table(content)
        if table is None:
            return TextContentSplitter(self.max_chunk_size).split(content)

        chunks = self._split_rows(table)
        if not table.rest:
            return chunks
        last = chunks[-1]
        if table.rest.isspace() and self.fits(last.content + table.rest):
            # trailing newlines stay with the table
            chunks[-1] = self._make_chunk(last.content + table.rest, **last.metadata)
            return chunks
        return chunks + TextContentSplitter(self.max_chunk_size).split(table.rest)

    def _split_rows(self, table: ParsedTable) -> List[Chunk]:
        decoration = table.decoration
        budget = self.max_chunk_size - byte_length(decoration)
        meta = {"headers": table.headers}
        for row in table.rows:
            if byte_length(row) > budget:
                raise MinimumChunkSizeError(byte_length(decoration + row), self.max_chunk_size)
        if not table.rows:
            if budget < 0:
                raise MinimumChunkSizeError(byte_length(decoration), self.max_chunk_size)
            return [self._make_chunk(decoration.rstrip("\n"), **meta)]

        chunks: List[Chunk] = []
        current: List[str] = []
        current_size = 0
        for row in table.rows:
            # +1 for the newline joining rows
            size = byte_length(row) + (1 if current else 0)
            if current and current_size + size > budget:
                chunks.append(self._make_chunk(decoration + "\n".join(current), **meta))
                current, current_size = [], 0
                size = byte_length(row)
            current.append(row)
            current_size += size
        chunks.append(self._make_chunk(decoration + "\n".join(current), **meta))
        return chunks
