"""
Unit tests for the category taxonomy and lexicon.
"""

import pytest

from seraph.exceptions import LexiconError, UnknownCategoryError
from seraph.ranking.categories import (
    Category,
    CategoryLexicon,
    NONE_CATEGORY,
    build_default_lexicon,
    ordered_scores,
)


class TestCategoryLexicon:
    """Test CategoryLexicon construction and lookups."""

    def test_declaration_order_preserved(self):
        lexicon = CategoryLexicon({"B": ["x"], "A": ["y"], "C": ["z"]})
        assert lexicon.categories == ("B", "A", "C")
        assert list(lexicon) == ["B", "A", "C"]
        assert len(lexicon) == 3

    def test_accepts_enum_keys(self):
        lexicon = CategoryLexicon({Category.SADNESS: ["sad"]})
        assert lexicon.categories == ("SADNESS",)
        assert Category.SADNESS in lexicon
        assert "SADNESS" in lexicon
        assert lexicon.tokens(Category.SADNESS) == ("sad",)

    def test_term_set(self):
        lexicon = CategoryLexicon({"A": ["x", "y", "x"]})
        assert lexicon.tokens("A") == ("x", "y", "x")
        assert lexicon.term_set("A") == frozenset({"x", "y"})

    def test_empty_lexicon_rejected(self):
        with pytest.raises(LexiconError):
            CategoryLexicon({})

    def test_category_without_tokens_rejected(self):
        with pytest.raises(LexiconError, match="no lexicon tokens"):
            CategoryLexicon({"A": ["x"], "B": []})

    def test_none_key_reserved(self):
        with pytest.raises(LexiconError, match="reserved"):
            CategoryLexicon({NONE_CATEGORY: ["x"]})

    def test_enum_and_string_duplicate_rejected(self):
        with pytest.raises(LexiconError, match="Duplicate"):
            CategoryLexicon({Category.SADNESS: ["sad"], "SADNESS": ["cri"]})

    def test_hard_evidence_category_must_exist(self):
        with pytest.raises(LexiconError, match="no lexicon entry"):
            CategoryLexicon({"A": ["x"]}, hard_evidence_category="B")

    def test_require_lists_unknown_categories(self):
        lexicon = CategoryLexicon({"A": ["x"]})
        lexicon.require(["A"])

        with pytest.raises(UnknownCategoryError) as exc_info:
            lexicon.require(["A", "Z", "Y"])

        assert exc_info.value.categories == ["Y", "Z"]

    def test_from_vocabulary_tokenizes_words(self):
        lexicon = CategoryLexicon.from_vocabulary(
            {"SAD": ["Crying", "the", "depressed"]},
        )
        # "the" is a stopword and disappears
        assert lexicon.tokens("SAD") == ("cri", "depress")

    def test_from_vocabulary_custom_tokenizer(self):
        lexicon = CategoryLexicon.from_vocabulary(
            {"A": ["Foo Bar"]},
            tokenizer=lambda text: text.lower().split(),
        )
        assert lexicon.tokens("A") == ("foo", "bar")


class TestDefaultLexicon:
    """Test the built-in five-category lexicon."""

    def test_categories_and_flags(self):
        lexicon = build_default_lexicon()

        assert lexicon.categories == (
            "SADNESS",
            "HOSTILITY",
            "ANXIETY_STRESS",
            "SELF_HARM_RISK",
            "FUNCTIONAL_BASELINE",
        )
        assert lexicon.hard_evidence_category == "SELF_HARM_RISK"

    def test_tokens_are_normalized(self):
        lexicon = build_default_lexicon()
        assert "cri" in lexicon.term_set(Category.SADNESS)
        assert "suicid" in lexicon.term_set(Category.SELF_HARM_RISK)

    def test_cached_instance(self):
        assert build_default_lexicon() is build_default_lexicon()


class TestOrderedScores:
    """Test ordered_scores()."""

    def test_reorders_and_fills_missing(self):
        lexicon = CategoryLexicon({"A": ["x"], "B": ["y"], "C": ["z"]})
        result = ordered_scores(lexicon, {"C": 0.3, "A": 1})

        assert list(result) == ["A", "B", "C"]
        assert result == {"A": 1.0, "B": 0.0, "C": 0.3}
