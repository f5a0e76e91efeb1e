from __future__ import annotations

from synopsis.preprocessing.cleaning import normalize_whitespace, word_count


def test_normalize_whitespace_collapses_runs_and_controls():
    raw = "  Hello\x00\x07\n\t  world   !  "
    assert normalize_whitespace(raw) == "Hello world !"


def test_normalize_whitespace_is_idempotent():
    samples = ["", "   ", "a", " a\n\nb\tc ", "One.  Two!\r\nThree?", "x  y"]
    for raw in samples:
        once = normalize_whitespace(raw)
        assert normalize_whitespace(once) == once


def test_normalize_whitespace_empty():
    assert normalize_whitespace("") == ""
    assert normalize_whitespace(" \n\t ") == ""


def test_word_count():
    assert word_count("") == 0
    assert word_count("  one two   three ") == 3
