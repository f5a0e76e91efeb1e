from __future__ import annotations

import re


_WS_RE = re.compile(r"\s+")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run into one space and strip the ends.

    Control characters and non-breaking spaces count as whitespace, so the
    result never contains them. Idempotent.
    """
    if not text:
        return ""
    text = _CONTROL_CHARS_RE.sub(" ", text)
    text = text.replace("\u00a0", " ")
    return _WS_RE.sub(" ", text).strip()


def word_count(text: str) -> int:
    return len(text.split())
