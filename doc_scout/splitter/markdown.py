# doc_scout/splitter/markdown.py
"""
Section-aware Markdown splitter.

The document is cut into sections at H1-H3 headings. Inside a section,
fenced code blocks go through :class:`CodeContentSplitter`, tables through
:class:`TableContentSplitter` and everything else through
:class:`TextContentSplitter`. Every chunk carries ``type`` (``text``,
``code`` or ``table``) and ``section`` metadata: the heading title, its level
and the path of headings leading to it.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Sequence, Tuple

from doc_scout.splitter.base import Chunk, ContentSplitter
from doc_scout.splitter.code import CodeContentSplitter
from doc_scout.splitter.table import TableContentSplitter, table_end
from doc_scout.splitter.text import TextContentSplitter

_HEADING_RE = re.compile(r"^(#{1,3})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")
_FENCE_RE = re.compile(r"^[ \t]{0,3}(`{3,}|~{3,})[ \t]*([^`\s]*)")


def _section(stack: Sequence[Tuple[int, str]]) -> Dict[str, Any]:
    if not stack:
        return {"title": "", "level": 0, "path": []}
    level, title = stack[-1]
    return {"title": title, "level": level, "path": [t for _, t in stack]}


def _fence_end(lines: Sequence[str], start: int, marker: str) -> int:
    """Строка с закрывающим забором; ``len(lines)`` если блок не закрыт."""
    for j in range(start + 1, len(lines)):
        stripped = lines[j].strip()
        if len(stripped) >= len(marker) and set(stripped) == {marker[0]}:
            return j
    return len(lines)


def has_markdown_structure(content: str) -> bool:
    """True, если в тексте есть заголовок H1-H3, ```-блок или таблица."""
    lines = content.splitlines()
    for i, line in enumerate(lines):
        if _HEADING_RE.match(line) or _FENCE_RE.match(line):
            return True
        if table_end(lines, i) > i:
            return True
    return False


class MarkdownContentSplitter(ContentSplitter):
    def split(self, content: str) -> List[Chunk]:
        if not content.strip():
            return TextContentSplitter(self.max_chunk_size).split(content)

        lines = content.splitlines(keepends=True)
        chunks: List[Chunk] = []
        stack: List[Tuple[int, str]] = []
        section = _section(stack)
        text: List[str] = []
        i = 0
        while i < len(lines):
            line = lines[i]
            heading = _HEADING_RE.match(line.rstrip("\r\n"))
            fence = _FENCE_RE.match(line)
            end = table_end(lines, i)
            if heading:
                self._flush_text(text, section, chunks)
                level = len(heading.group(1))
                while stack and stack[-1][0] >= level:
                    stack.pop()
                stack.append((level, heading.group(2)))
                section = _section(stack)
                # the heading line opens the section's text
                text = [line]
                i += 1
            elif fence:
                self._flush_text(text, section, chunks)
                text = []
                close = _fence_end(lines, i, fence.group(1))
                body = "".join(lines[i + 1:close]).rstrip("\r\n")
                splitter = CodeContentSplitter(self.max_chunk_size, fence.group(2) or None)
                chunks.extend(self._tag(splitter.split(body), "code", section))
                i = close + 1
            elif end > i:
                self._flush_text(text, section, chunks)
                text = []
                table = "".join(lines[i:end])
                splitter = TableContentSplitter(self.max_chunk_size)
                chunks.extend(self._tag(splitter.split(table), "table", section))
                i = end
            else:
                text.append(line)
                i += 1
        self._flush_text(text, section, chunks)
        return chunks

    def _flush_text(self, text: List[str], section: Dict[str, Any], chunks: List[Chunk]) -> None:
        body = "".join(text)
        # blank lines between blocks carry nothing
        if not body.strip():
            return
        splitter = TextContentSplitter(self.max_chunk_size)
        chunks.extend(self._tag(splitter.split(body), "text", section))

    def _tag(self, chunks: List[Chunk], kind: str, section: Dict[str, Any]) -> List[Chunk]:
        return [
            self._make_chunk(
                chunk.content,
                **chunk.metadata,
                type=kind,
                section={**section, "path": list(section["path"])},
            )
            for chunk in chunks
        ]
