from __future__ import annotations

import logging
from typing import Any


logger = logging.getLogger("synopsis.tokenization")


def build_tokenizer(model_name: str):
    try:
        from transformers import AutoTokenizer
    except ImportError as e:  # pragma: no cover
        raise RuntimeError("Missing dependency `transformers`. Install: pip install transformers") from e
    logger.info("Loading tokenizer: %s", model_name)
    return AutoTokenizer.from_pretrained(model_name, use_fast=True)


def token_len(tokenizer: Any, text: str) -> int:
    """Number of tokens in ``text`` without special tokens."""
    return len(tokenizer(text, add_special_tokens=False)["input_ids"])
