# doc_scout/splitter/__init__.py
"""
Разбиение нормализованного текста на чанки ограниченного размера.
"""
from __future__ import annotations

import json
from typing import List, Optional

from .base import Chunk, ContentSplitter, byte_length
from .code import CodeContentSplitter
from .json_splitter import JsonContentSplitter
from .markdown import MarkdownContentSplitter, has_markdown_structure
from .table import TableContentSplitter
from .text import TextContentSplitter

__all__ = [
    "Chunk",
    "ContentSplitter",
    "CodeContentSplitter",
    "JsonContentSplitter",
    "MarkdownContentSplitter",
    "TableContentSplitter",
    "TextContentSplitter",
    "SPLITTER_KINDS",
    "byte_length",
    "select_splitter",
    "split_content",
]

SPLITTER_KINDS = ("auto", "text", "markdown", "table", "json", "code")


def _looks_like_json(content: str) -> bool:
    stripped = content.strip()
    if not stripped or stripped[0] not in "[{":
        return False
    try:
        json.loads(stripped)
    except ValueError:
        return False
    return True


def select_splitter(
    content: str, max_chunk_size: int, kind: str = "auto", language: Optional[str] = None
) -> ContentSplitter:
    """Выбор сплиттера по явному ``kind`` или, для ``auto``, по форме контента.

    ``auto``: валидный JSON -> json; заголовки, ```-блоки или таблицы -> markdown;
    иначе text.
    """
    if kind not in SPLITTER_KINDS:
        raise ValueError(f"Unknown splitter kind '{kind}', expected one of {SPLITTER_KINDS}")
    if kind == "auto":
        if _looks_like_json(content):
            kind = "json"
        elif has_markdown_structure(content):
            kind = "markdown"
        else:
            kind = "text"
    if kind == "json":
        return JsonContentSplitter(max_chunk_size)
    if kind == "markdown":
        return MarkdownContentSplitter(max_chunk_size)
    if kind == "table":
        return TableContentSplitter(max_chunk_size)
    if kind == "code":
        return CodeContentSplitter(max_chunk_size, language)
    return TextContentSplitter(max_chunk_size)


def split_content(
    content: str, max_chunk_size: int, kind: str = "auto", language: Optional[str] = None
) -> List[Chunk]:
    return select_splitter(content, max_chunk_size, kind, language).split(content)
