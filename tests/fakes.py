from __future__ import annotations

import threading


class WordTokenizer:
    """Treats each whitespace-separated word as one token."""

    def __call__(self, text: str, add_special_tokens: bool = False):
        return {"input_ids": list(range(len(text.split())))}


class EchoEngine:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def summarize(self, text: str) -> str:
        self.calls.append(text)
        return text


class HalvingEngine:
    """Keeps the first half of the words; deterministic and shrinking."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def summarize(self, text: str) -> str:
        self.calls.append(text)
        words = text.split()
        return " ".join(words[: max(1, len(words) // 2)])


class ConstantEngine:
    def __init__(self, output: str) -> None:
        self.output = output
        self.calls = 0

    def summarize(self, text: str) -> str:
        self.calls += 1
        return self.output


class FailingEngine:
    def summarize(self, text: str) -> str:
        raise ValueError("CUDA out of memory")


class BlockingEngine:
    def __init__(self) -> None:
        self.release = threading.Event()
        self.entered = threading.Event()

    def summarize(self, text: str) -> str:
        self.entered.set()
        self.release.wait(5)
        return text

