from __future__ import annotations

import logging
import os
import signal
from functools import partial
from typing import Any, Callable, Optional

from synopsis.config import Settings
from synopsis.core.controller import SummarizationController, SummarizationRequest, SummaryResult
from synopsis.core.handler import RequestHandler
from synopsis.errors import DispatchError
from synopsis.models.engine import Seq2SeqSummarizer
from synopsis.models.gateway import ModelGateway
from synopsis.preprocessing.chunking import ChunkSplitter
from synopsis.preprocessing.tokenization import build_tokenizer


logger = logging.getLogger("synopsis.service")


def _terminate_process(error: BaseException) -> None:
    logger.critical("Summarization model unavailable, shutting down: %s", error)
    os.kill(os.getpid(), signal.SIGTERM)


class SynopsisService:
    """Wires tokenizer, splitter, model gateway, controller and worker together.

    ``tokenizer_factory`` and ``engine_loader`` default to the Hugging Face
    loaders named in the settings. The tokenizer is built synchronously in
    :meth:`start`, so a bad tokenizer aborts startup; the model loads in the
    background.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        tokenizer_factory: Optional[Callable[[], Any]] = None,
        engine_loader: Optional[Callable[[], Any]] = None,
        on_load_failure: Optional[Callable[[BaseException], None]] = None,
    ) -> None:
        self.settings = settings
        self._tokenizer_factory = tokenizer_factory or partial(build_tokenizer, settings.chunking.tokenizer_name)
        if on_load_failure is None and settings.server.fail_fast:
            on_load_failure = _terminate_process
        self.gateway = ModelGateway(
            engine_loader or partial(Seq2SeqSummarizer.load, settings.model),
            on_failure=on_load_failure,
            ready_timeout=settings.loop.ready_timeout_s,
        )
        self.handler: Optional[RequestHandler] = None

    def start(self) -> None:
        if self.handler is not None:
            return
        splitter = ChunkSplitter(self._tokenizer_factory(), max_tokens=self.settings.chunking.max_tokens)
        self.gateway.start()
        controller = SummarizationController(
            splitter,
            self.gateway,
            max_iterations=self.settings.loop.max_iterations,
        )
        self.handler = RequestHandler(controller, max_pending=self.settings.server.max_pending)
        logger.info("Summarization service started")

    @property
    def load_failed(self) -> bool:
        return self.gateway.state == "failed"

    @property
    def pending(self) -> int:
        return self.handler.pending if self.handler is not None else 0

    def _require_handler(self) -> RequestHandler:
        if self.handler is None:
            raise DispatchError("summarization service is not started")
        return self.handler

    async def summarize(self, request: SummarizationRequest) -> SummaryResult:
        return await self._require_handler().handle(request)

    def summarize_blocking(self, request: SummarizationRequest) -> SummaryResult:
        return self._require_handler().summarize(request)

    def shutdown(self) -> None:
        if self.handler is None:
            return
        self.handler.shutdown()
        self.handler = None
        logger.info("Summarization service stopped")
