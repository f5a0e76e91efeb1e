from __future__ import annotations

import asyncio
import threading
import time

import pytest

from fakes import BlockingEngine, EchoEngine
from synopsis.core.controller import SummarizationController, SummarizationRequest, WordCountRange
from synopsis.core.handler import RequestHandler
from synopsis.errors import DispatchError, SummarizationRuntimeError
from synopsis.models.gateway import ModelGateway
from synopsis.preprocessing.chunking import ChunkSplitter


def _handler(tokenizer, engine, *, max_pending=0) -> RequestHandler:
    controller = SummarizationController(ChunkSplitter(tokenizer, max_tokens=512), ModelGateway(lambda: engine))
    return RequestHandler(controller, max_pending=max_pending)


def _request(text: str) -> SummarizationRequest:
    return SummarizationRequest(text=text, target_range=WordCountRange(min=0, max=1000))


class RecordingEngine:
    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []
        self._active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def summarize(self, text: str) -> str:
        with self._lock:
            self._active += 1
            self.max_active = max(self.max_active, self._active)
            self.events.append(("start", text))
        time.sleep(0.01)
        with self._lock:
            self.events.append(("end", text))
            self._active -= 1
        return text


def test_concurrent_requests_run_one_at_a_time_in_order(tokenizer):
    engine = RecordingEngine()
    handler = _handler(tokenizer, engine)
    texts = [f"request number {i}" for i in range(8)]

    async def run_all():
        return await asyncio.gather(*(handler.handle(_request(t)) for t in texts))

    try:
        results = asyncio.run(run_all())
    finally:
        handler.shutdown()

    assert [r.summary for r in results] == texts
    assert engine.max_active == 1
    expected = [event for t in texts for event in (("start", t), ("end", t))]
    assert engine.events == expected


def test_full_queue_raises_dispatch_error(tokenizer):
    engine = BlockingEngine()
    handler = _handler(tokenizer, engine, max_pending=1)
    try:
        first = handler.submit(_request("first"))
        assert engine.entered.wait(5)
        assert handler.pending == 1
        with pytest.raises(DispatchError):
            handler.submit(_request("second"))
        engine.release.set()
        assert first.result(5).summary == "first"
    finally:
        engine.release.set()
        handler.shutdown()


def test_submit_after_shutdown_raises_dispatch_error(tokenizer):
    handler = _handler(tokenizer, EchoEngine())
    handler.shutdown()
    with pytest.raises(DispatchError):
        handler.summarize(_request("late"))


def test_unexpected_errors_are_wrapped(tokenizer):
    class BrokenController:
        def summarize(self, request):
            raise KeyError("boom")

    handler = RequestHandler(BrokenController())
    try:
        with pytest.raises(SummarizationRuntimeError):
            handler.summarize(_request("x"))
    finally:
        handler.shutdown()
