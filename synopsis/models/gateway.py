from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Literal, Optional

from synopsis.errors import ModelLoadError, SummarizationError, SummarizationRuntimeError


logger = logging.getLogger("synopsis.gateway")

ModelState = Literal["idle", "loading", "ready", "failed"]


class ModelGateway:
    """Owns the summarization engine and its one-time background load.

    ``loader`` is called once on a daemon thread and must return an object
    with ``summarize(text) -> str``. Callers of :meth:`summarize_chunk` block
    on an event until the load has finished; they never see a half-built
    engine. A failed load is remembered and re-raised to every caller as
    :class:`ModelLoadError`.
    """

    def __init__(
        self,
        loader: Callable[[], Any],
        *,
        on_failure: Optional[Callable[[BaseException], None]] = None,
        ready_timeout: Optional[float] = None,
    ) -> None:
        self._loader = loader
        self._on_failure = on_failure
        self._ready_timeout = ready_timeout

        self._lock = threading.Lock()
        self._ready = threading.Event()
        self._inference_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._engine: Any = None
        self._error: Optional[BaseException] = None

    def start(self) -> None:
        """Start loading in the background. Safe to call more than once."""
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(target=self._load, name="synopsis-model-loader", daemon=True)
            self._thread.start()

    def _load(self) -> None:
        try:
            engine = self._loader()
        except Exception as e:
            logger.exception("Model load failed")
            with self._lock:
                self._error = e
            self._ready.set()
            if self._on_failure is not None:
                self._on_failure(e)
            return

        with self._lock:
            self._engine = engine
        self._ready.set()
        logger.info("Model gateway ready")

    @property
    def state(self) -> ModelState:
        with self._lock:
            if self._thread is None:
                return "idle"
            if self._error is not None:
                return "failed"
            if self._engine is not None:
                return "ready"
            return "loading"

    @property
    def is_ready(self) -> bool:
        return self.state == "ready"

    def wait_ready(self, timeout: Optional[float] = None) -> Any:
        self.start()
        if not self._ready.wait(timeout):
            raise ModelLoadError(f"model not ready after {timeout}s")
        with self._lock:
            engine, error = self._engine, self._error
        if error is not None:
            raise ModelLoadError(f"model failed to load: {error}") from error
        return engine

    def summarize_chunk(self, text: str) -> str:
        engine = self.wait_ready(self._ready_timeout)
        with self._inference_lock:
            try:
                return engine.summarize(text)
            except SummarizationError:
                raise
            except Exception as e:
                raise SummarizationRuntimeError(f"inference failed: {e}") from e
