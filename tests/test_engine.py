from __future__ import annotations

import pytest

torch = pytest.importorskip("torch")

from synopsis.config import ModelSettings  # noqa: E402
from synopsis.models.engine import Seq2SeqSummarizer  # noqa: E402


class FakeTokenizer:
    def __init__(self) -> None:
        self.inputs: list[str] = []

    def __call__(self, text, return_tensors=None, truncation=False, max_length=None):
        self.inputs.append(text)
        return {"input_ids": torch.tensor([[1, 2, 3]]), "attention_mask": torch.tensor([[1, 1, 1]])}

    def decode(self, ids, skip_special_tokens=True):
        return "  generated summary  "


class FakeModel:
    def __init__(self) -> None:
        self.kwargs: dict = {}

    def generate(self, **kwargs):
        self.kwargs = kwargs
        return torch.tensor([[7, 8, 9]])


def test_summarize_decodes_without_sampling():
    model, tok = FakeModel(), FakeTokenizer()
    engine = Seq2SeqSummarizer(model, tok, torch.device("cpu"), ModelSettings())
    assert engine.summarize("long article") == "generated summary"
    assert model.kwargs["do_sample"] is False
    assert model.kwargs["num_beams"] == 4
    assert model.kwargs["max_length"] == 142
    assert tok.inputs == ["long article"]


def test_t5_models_get_a_task_prefix():
    tok = FakeTokenizer()
    engine = Seq2SeqSummarizer(FakeModel(), tok, torch.device("cpu"), ModelSettings(model_name="t5-small"))
    engine.summarize(" some text ")
    assert tok.inputs == ["summarize: some text"]
