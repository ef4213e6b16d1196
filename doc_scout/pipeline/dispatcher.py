# doc_scout/pipeline/dispatcher.py
"""
Middleware-chain executor.

Stages run strictly in list order. Each stage receives a ``proceed`` callable
bound to its own position; calling it invokes the next stage (or returns past
the last one). The cursor only moves forward, so a second ``proceed`` from the
same stage is rejected with :class:`DispatchProtocolError`.

Nothing escapes :func:`run_stages`: the first exception reaching the boundary
is appended to ``context.errors`` and the rest of the chain is skipped.
"""
from __future__ import annotations

import logging
from functools import partial
from typing import List, Sequence

from doc_scout.errors import DispatchProtocolError, as_error
from doc_scout.pipeline.context import ProcessingContext, Stage

logger = logging.getLogger("DocScout")

__all__ = ["run_stages"]


class _Dispatch:
    def __init__(self, stages: Sequence[Stage], context: ProcessingContext) -> None:
        self._stages: List[Stage] = list(stages)
        self._context = context
        self._cursor = -1

    async def invoke(self, index: int) -> None:
        if index <= self._cursor:
            raise DispatchProtocolError("next called multiple times")
        self._cursor = index
        if index >= len(self._stages):
            return
        stage = self._stages[index]
        await stage.process(self._context, partial(self.invoke, index + 1))


async def run_stages(stages: Sequence[Stage], context: ProcessingContext) -> None:
    """Run *stages* over *context*; errors are recorded, never raised."""
    try:
        await _Dispatch(stages, context).invoke(0)
    except Exception as exc:
        logger.debug("Pipeline stopped for %s: %s", context.source_url, exc)
        context.errors.append(as_error(exc))
