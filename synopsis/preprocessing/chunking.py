from __future__ import annotations

import logging
import re
from typing import Any, Callable, Iterator

from synopsis.errors import ConfigurationError
from synopsis.preprocessing.tokenization import token_len


logger = logging.getLogger("synopsis.chunking")

_SENTENCE_BREAK_RE = re.compile(r"(?<=[.!?;:])\s+")


def _split_sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_BREAK_RE.split(text) if s.strip()]


def _split_words(text: str) -> list[str]:
    return text.split()


# Coarsest boundary first. Past the last level a piece is cut by characters.
_LEVELS: tuple[Callable[[str], list[str]], ...] = (_split_sentences, _split_words)


class ChunkSplitter:
    """Split text into ordered chunks that each fit a token budget.

    Sentences are packed greedily into a chunk while the chunk still fits.
    A sentence that is too long on its own is packed word by word, and a
    single word that is still too long is cut into character spans. Pieces
    inside a chunk are joined by one space, so for normalized input joining
    the chunks with a space gives back the input (except where a word had to
    be cut).
    """

    def __init__(self, tokenizer: Any, max_tokens: int = 512) -> None:
        if max_tokens <= 0:
            raise ConfigurationError(f"max_tokens must be positive, got {max_tokens}")
        self.tokenizer = tokenizer
        self.max_tokens = max_tokens

    def _fits(self, text: str) -> bool:
        return token_len(self.tokenizer, text) <= self.max_tokens

    def chunks(self, text: str) -> Iterator[str]:
        text = text.strip()
        if not text:
            return
        yield from self._split(text, 0)

    def split(self, text: str) -> list[str]:
        return list(self.chunks(text))

    def _split(self, text: str, level: int) -> Iterator[str]:
        if self._fits(text):
            yield text
            return
        if level >= len(_LEVELS):
            yield from self._split_chars(text)
            return

        pieces = _LEVELS[level](text)
        if len(pieces) <= 1:
            yield from self._split(text, level + 1)
            return

        current = ""
        for piece in pieces:
            candidate = f"{current} {piece}" if current else piece
            if self._fits(candidate):
                current = candidate
                continue
            if current:
                yield current
            if self._fits(piece):
                current = piece
            else:
                yield from self._split(piece, level + 1)
                current = ""
        if current:
            yield current

    def _split_chars(self, text: str) -> Iterator[str]:
        while text:
            # Longest prefix that still fits; always advance by one character.
            lo, hi = 1, len(text)
            while lo < hi:
                mid = (lo + hi + 1) // 2
                if self._fits(text[:mid]):
                    lo = mid
                else:
                    hi = mid - 1
            if lo == 1 and not self._fits(text[:1]):
                logger.warning("Single character exceeds %d tokens; emitting it anyway", self.max_tokens)
            yield text[:lo]
            text = text[lo:]
