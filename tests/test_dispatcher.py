# File: tests/test_dispatcher.py
"""Порядок стадий, одноразовый proceed, fail-open / fail-closed."""
import pytest

from doc_scout.config import ScrapeOptions
from doc_scout.errors import DispatchProtocolError, StageError
from doc_scout.pipeline import ProcessingContext, run_stages


def make_context() -> ProcessingContext:
    return ProcessingContext(
        content="",
        source_url="https://example.com/",
        content_type="text/plain",
        options=ScrapeOptions(url="https://example.com/"),
    )


class Marker:
    def __init__(self, name):
        self.name = name

    async def process(self, context, proceed):
        context.metadata.setdefault("order", []).append(self.name)
        await proceed()


class CallsProceedTwice:
    async def process(self, context, proceed):
        await proceed()
        await proceed()


class FailClosed:
    async def process(self, context, proceed):
        raise RuntimeError("boom")


class FailOpen:
    async def process(self, context, proceed):
        context.errors.append(StageError("soft failure"))
        await proceed()


class Counter:
    def __init__(self):
        self.runs = 0

    async def process(self, context, proceed):
        self.runs += 1
        await proceed()


@pytest.mark.asyncio()
async def test_stages_run_in_order():
    ctx = make_context()
    await run_stages([Marker(str(i)) for i in range(5)], ctx)
    assert ctx.metadata["order"] == ["0", "1", "2", "3", "4"]
    assert ctx.errors == []


@pytest.mark.asyncio()
async def test_empty_stage_list_is_noop():
    ctx = make_context()
    await run_stages([], ctx)
    assert ctx.errors == []


@pytest.mark.asyncio()
async def test_proceed_twice_records_one_error():
    ctx = make_context()
    counter = Counter()
    await run_stages([CallsProceedTwice(), counter], ctx)
    assert len(ctx.errors) == 1
    assert isinstance(ctx.errors[0], DispatchProtocolError)
    assert str(ctx.errors[0]) == "next called multiple times"
    assert counter.runs == 1


@pytest.mark.asyncio()
async def test_fail_closed_stops_chain():
    ctx = make_context()
    after = Marker("after")
    await run_stages([Marker("before"), FailClosed(), after], ctx)
    assert ctx.metadata["order"] == ["before"]
    assert [str(e) for e in ctx.errors] == ["boom"]


@pytest.mark.asyncio()
async def test_fail_open_continues_chain():
    ctx = make_context()
    await run_stages([FailOpen(), Marker("after")], ctx)
    assert ctx.metadata["order"] == ["after"]
    assert [str(e) for e in ctx.errors] == ["soft failure"]


@pytest.mark.asyncio()
async def test_stage_not_calling_proceed_halts_silently():
    class Stop:
        async def process(self, context, proceed):
            return None

    ctx = make_context()
    await run_stages([Stop(), Marker("never")], ctx)
    assert "order" not in ctx.metadata
    assert ctx.errors == []
