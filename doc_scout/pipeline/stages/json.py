# doc_scout/pipeline/stages/json.py
"""
JSON stages: parse (fail-closed), metadata, normalized pretty text.
"""
from __future__ import annotations

import json
import logging

from doc_scout.errors import StageError
from doc_scout.pipeline.context import Proceed, ProcessingContext

logger = logging.getLogger("DocScout")

_TITLE_KEYS = ("title", "name")


class JsonParserStage:
    async def process(self, context: ProcessingContext, proceed: Proceed) -> None:
        try:
            context.document = json.loads(context.content)
        except ValueError as exc:
            logger.error("Invalid JSON in %s: %s", context.source_url, exc)
            context.errors.append(StageError(f"Failed to parse JSON: {exc}"))
            return
        await proceed()


class JsonMetadataStage:
    """Title from a top-level ``title``/``name`` string, otherwise the last URL segment."""

    async def process(self, context: ProcessingContext, proceed: Proceed) -> None:
        data = context.document
        title = None
        if isinstance(data, dict):
            for key in _TITLE_KEYS:
                value = data.get(key)
                if isinstance(value, str) and value.strip():
                    title = value.strip()
                    break
            if isinstance(data.get("description"), str):
                context.metadata["description"] = data["description"]
        if title is None:
            title = context.source_url.rstrip("/").rsplit("/", 1)[-1] or "Untitled"
        context.metadata["title"] = title
        context.metadata["json_type"] = type(data).__name__ if data is not None else "null"
        await proceed()


class JsonNormalizeStage:
    async def process(self, context: ProcessingContext, proceed: Proceed) -> None:
        try:
            context.content = json.dumps(context.document, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            context.errors.append(StageError(f"Failed to serialize JSON: {exc}"))
        await proceed()
