# doc_scout/pipeline/json_pipeline.py
from __future__ import annotations

from doc_scout.pipeline.base import BasePipeline
from doc_scout.pipeline.stages import JsonMetadataStage, JsonNormalizeStage, JsonParserStage
from doc_scout.utils import is_json


class JsonPipeline(BasePipeline):
    def __init__(self) -> None:
        super().__init__([JsonParserStage(), JsonMetadataStage(), JsonNormalizeStage()])

    def can_process(self, mime_type: str) -> bool:
        return is_json(mime_type)
