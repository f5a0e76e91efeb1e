from __future__ import annotations

import logging
import time
from typing import Any

from synopsis.config import ModelSettings


logger = logging.getLogger("synopsis.engine")


def _resolve_device(device: str):
    import torch

    if device == "auto":
        return torch.device("cuda" if torch.cuda.is_available() else "cpu")
    if device == "cuda" and not torch.cuda.is_available():
        logger.warning("CUDA requested but not available; falling back to CPU")
        return torch.device("cpu")
    return torch.device(device)


class Seq2SeqSummarizer:
    """Abstractive summarizer backed by a Hugging Face seq2seq checkpoint.

    Decoding never samples, so the same input always produces the same
    summary. The iterative loop relies on that to detect a fixed point.
    """

    def __init__(self, model: Any, tokenizer: Any, device: Any, settings: ModelSettings) -> None:
        self._model = model
        self._tokenizer = tokenizer
        self._device = device
        self.settings = settings

    @classmethod
    def load(cls, settings: ModelSettings) -> "Seq2SeqSummarizer":
        logger.info("Loading summarization model: %s", settings.model_name)
        start = time.perf_counter()

        # Heavy imports deferred.
        from transformers import AutoModelForSeq2SeqLM, AutoTokenizer

        device = _resolve_device(settings.device)
        tokenizer = AutoTokenizer.from_pretrained(settings.model_name, use_fast=True)
        model = AutoModelForSeq2SeqLM.from_pretrained(settings.model_name)
        model.to(device)
        model.eval()

        logger.info(
            "Model %s ready on %s in %.1fs",
            settings.model_name,
            device,
            time.perf_counter() - start,
        )
        return cls(model, tokenizer, device, settings)

    @property
    def model_id(self) -> str:
        return self.settings.model_name

    def _maybe_prefix(self, text: str) -> str:
        # T5-style models expect a task prefix.
        if "t5" in self.model_id.lower() and not text.lstrip().lower().startswith("summarize:"):
            return f"summarize: {text.strip()}"
        return text

    def summarize(self, text: str) -> str:
        import torch

        decoding = self.settings.decoding
        inputs = self._tokenizer(
            self._maybe_prefix(text),
            return_tensors="pt",
            truncation=True,
            max_length=self.settings.max_input_tokens,
        )
        inputs = {k: v.to(self._device) for k, v in inputs.items()}
        with torch.inference_mode():
            output_ids = self._model.generate(
                **inputs,
                num_beams=decoding.num_beams,
                do_sample=False,
                min_length=decoding.min_length,
                max_length=decoding.max_length,
                no_repeat_ngram_size=decoding.no_repeat_ngram_size,
                length_penalty=decoding.length_penalty,
                early_stopping=True,
            )
        return self._tokenizer.decode(output_ids[0], skip_special_tokens=True).strip()
