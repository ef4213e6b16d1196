# doc_scout/pipeline/__init__.py
from typing import List, Optional, Sequence

from .base import BasePipeline
from .context import ProcessingContext, Proceed, Stage
from .directory import DirectoryPipeline
from .dispatcher import run_stages
from .html import HtmlPipeline
from .json_pipeline import JsonPipeline
from .markdown import MarkdownPipeline

__all__ = [
    "BasePipeline",
    "DirectoryPipeline",
    "HtmlPipeline",
    "JsonPipeline",
    "MarkdownPipeline",
    "ProcessingContext",
    "Proceed",
    "Stage",
    "default_pipelines",
    "select_pipeline",
    "run_stages",
]


def default_pipelines() -> List[BasePipeline]:
    """Порядок важен: первый подходящий конвейер обрабатывает контент."""
    return [HtmlPipeline(), JsonPipeline(), MarkdownPipeline(), DirectoryPipeline()]


def select_pipeline(pipelines: Sequence[BasePipeline], mime_type: str) -> Optional[BasePipeline]:
    return next((p for p in pipelines if p.can_process(mime_type)), None)
