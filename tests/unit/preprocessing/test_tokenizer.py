"""
Unit tests for the English post tokenizer.
"""

import pytest

from seraph.preprocessing import STOPWORDS_EN, stem, tokenize


class TestTokenize:
    """Test tokenize()."""

    def test_none_and_empty_yield_no_tokens(self):
        assert tokenize(None) == []
        assert tokenize("") == []
        assert tokenize("   ") == []

    def test_lowercases_and_stems(self):
        assert tokenize("Crying DEPRESSED") == ["cri", "depress"]

    def test_drops_stopwords(self):
        tokens = tokenize("the pain is in the heart")
        assert tokens == ["pain", "heart"]
        for word in ("the", "is", "in"):
            assert word in STOPWORDS_EN

    def test_drops_pure_numbers(self):
        assert tokenize("Ran 5 miles in 2024") == ["ran", "mile"]

    def test_keeps_alphanumeric_words(self):
        assert tokenize("covid19 mp3") == ["covid19", "mp3"]

    def test_strips_possessive(self):
        assert tokenize("my friend's game") == tokenize("my friend game")

    def test_punctuation_splits_words(self):
        assert tokenize("panic!!!attack...") == ["panic", "attack"]

    def test_deterministic(self):
        text = "I hate this stupid job, so much pressure"
        assert tokenize(text) == tokenize(text)


class TestStem:
    """Test the Snowball stemmer wrapper."""

    @pytest.mark.parametrize("word,expected", [
        ("crying", "cri"),
        ("depressed", "depress"),
        ("breathe", "breath"),
        ("hopeless", "hopeless"),
    ])
    def test_known_stems(self, word, expected):
        assert stem(word) == expected
