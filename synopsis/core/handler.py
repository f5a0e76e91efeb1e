from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from synopsis.core.controller import SummarizationController, SummarizationRequest, SummaryResult
from synopsis.errors import DispatchError, SummarizationError, SummarizationRuntimeError


logger = logging.getLogger("synopsis.handler")


class RequestHandler:
    """Funnels every request through one worker thread.

    The executor's queue is the mailbox and its single thread the only
    consumer, so summarizations run one at a time in submission order.
    ``max_pending`` bounds queued plus running requests (0 means unbounded).
    """

    def __init__(self, controller: SummarizationController, *, max_pending: int = 0) -> None:
        self.controller = controller
        self.max_pending = max_pending
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="synopsis-worker")
        self._lock = threading.Lock()
        self._pending = 0
        self._closed = False

    @property
    def pending(self) -> int:
        with self._lock:
            return self._pending

    def submit(self, request: SummarizationRequest) -> "Future[SummaryResult]":
        with self._lock:
            if self._closed:
                raise DispatchError("summarization worker is shut down")
            if self.max_pending and self._pending >= self.max_pending:
                raise DispatchError(f"summarization queue is full ({self._pending} pending)")
            self._pending += 1
            try:
                future = self._executor.submit(self._run, request)
            except RuntimeError as e:
                self._pending -= 1
                raise DispatchError(str(e)) from e
        future.add_done_callback(self._release)
        return future

    def _release(self, _future: Future) -> None:
        with self._lock:
            self._pending -= 1

    def _run(self, request: SummarizationRequest) -> SummaryResult:
        try:
            return self.controller.summarize(request)
        except SummarizationError:
            raise
        except Exception as e:
            logger.exception("Unexpected failure in summarization worker")
            raise SummarizationRuntimeError(str(e)) from e

    async def handle(self, request: SummarizationRequest) -> SummaryResult:
        return await asyncio.wrap_future(self.submit(request))

    def summarize(self, request: SummarizationRequest) -> SummaryResult:
        """Blocking variant of :meth:`handle` for callers without an event loop."""
        return self.submit(request).result()

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)
