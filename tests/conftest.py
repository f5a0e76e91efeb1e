from __future__ import annotations

import pytest

from fakes import WordTokenizer


@pytest.fixture
def tokenizer() -> WordTokenizer:
    return WordTokenizer()
