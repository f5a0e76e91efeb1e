from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Literal, Optional

from synopsis.errors import InvalidRangeError, SummarizationError, SummarizationRuntimeError
from synopsis.models.gateway import ModelGateway
from synopsis.preprocessing.chunking import ChunkSplitter
from synopsis.preprocessing.cleaning import normalize_whitespace, word_count


logger = logging.getLogger("synopsis.controller")

StopReason = Literal["in_range", "fixed_point", "empty", "iteration_cap"]


@dataclass(frozen=True)
class WordCountRange:
    min: int
    max: int

    def contains(self, n: int) -> bool:
        return self.min <= n <= self.max


@dataclass(frozen=True)
class SummarizationRequest:
    text: str
    target_range: WordCountRange


@dataclass
class SummaryResult:
    summary: str
    iterations: int
    chunk_count: int
    word_count: int
    stop_reason: StopReason
    elapsed_ms: float


class SummarizationController:
    """Re-summarizes text chunk by chunk until its length lands in range.

    Each pass splits the current text, summarizes every chunk in order and
    joins the results with a space. The loop stops when the word count is
    inside the target range, or when a pass reproduces the previous pass
    exactly (a fixed point). ``max_iterations`` caps the number of passes for
    engines that never settle; 0 or ``None`` disables the cap.
    """

    def __init__(
        self,
        splitter: ChunkSplitter,
        gateway: ModelGateway,
        *,
        max_iterations: Optional[int] = 25,
    ) -> None:
        self.splitter = splitter
        self.gateway = gateway
        self.max_iterations = max_iterations or None

    def summarize(self, request: SummarizationRequest) -> SummaryResult:
        bounds = request.target_range
        if bounds.min > bounds.max:
            raise InvalidRangeError(f"min ({bounds.min}) is greater than max ({bounds.max})")

        start = time.perf_counter()
        current_text = normalize_whitespace(request.text)
        previous_summary = ""
        iterations = 0
        first_chunk_count = 0

        while True:
            chunks = self.splitter.split(current_text)
            if iterations == 0:
                first_chunk_count = len(chunks)
            if not chunks:
                return self._result("", iterations, first_chunk_count, "empty", start)

            iterations += 1
            summary = " ".join(self._summarize_chunk(chunk) for chunk in chunks)
            count = word_count(summary)
            logger.debug(
                "pass=%d chunks=%d words=%d target=[%d, %d]",
                iterations,
                len(chunks),
                count,
                bounds.min,
                bounds.max,
            )

            if bounds.contains(count):
                return self._result(summary, iterations, first_chunk_count, "in_range", start)
            if summary == previous_summary:
                logger.info("Summary reached a fixed point at %d words after %d passes", count, iterations)
                return self._result(summary, iterations, first_chunk_count, "fixed_point", start)
            if self.max_iterations is not None and iterations >= self.max_iterations:
                logger.warning(
                    "Stopping after %d passes at %d words without reaching [%d, %d]",
                    iterations,
                    count,
                    bounds.min,
                    bounds.max,
                )
                return self._result(summary, iterations, first_chunk_count, "iteration_cap", start)

            previous_summary = summary
            current_text = summary

    def _summarize_chunk(self, chunk: str) -> str:
        try:
            return self.gateway.summarize_chunk(chunk)
        except SummarizationError:
            raise
        except Exception as e:
            raise SummarizationRuntimeError(str(e)) from e

    @staticmethod
    def _result(summary: str, iterations: int, chunk_count: int, reason: StopReason, start: float) -> SummaryResult:
        summary = summary.strip()
        return SummaryResult(
            summary=summary,
            iterations=iterations,
            chunk_count=chunk_count,
            word_count=word_count(summary),
            stop_reason=reason,
            elapsed_ms=(time.perf_counter() - start) * 1000.0,
        )
