"""
Category taxonomy and the category lexicon.

The lexicon maps each category to the token sequence that acts as that
category's query. It is built once at process start, never mutated, and passed
explicitly into every analysis run, so any number of concurrent batches can
share it.

Declaration order is significant: it is the iteration order of every score
matrix and the tie-break order of best-category selection.
"""

from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..exceptions import LexiconError, UnknownCategoryError
from ..preprocessing import tokenize


# ============================================================================
# TAXONOMY
# ============================================================================

class Category(str, Enum):
    """Risk/sentiment categories for social-media posts."""
    SADNESS = "SADNESS"
    HOSTILITY = "HOSTILITY"
    ANXIETY_STRESS = "ANXIETY_STRESS"
    SELF_HARM_RISK = "SELF_HARM_RISK"
    FUNCTIONAL_BASELINE = "FUNCTIONAL_BASELINE"


# Reported when no category is selected for a post or a profile
NONE_CATEGORY = "NONE"

# Risk categories first so that exact ties resolve toward the risk label.
DEFAULT_VOCABULARY: Dict[Category, List[str]] = {
    Category.SADNESS: [
        "sad", "crying", "grief", "depressed", "lonely",
        "hopeless", "misery", "pain", "tears", "empty",
    ],
    Category.HOSTILITY: [
        "hate", "kill", "angry", "punch", "stupid",
        "idiot", "fight", "destroy", "enemy", "rage",
    ],
    Category.ANXIETY_STRESS: [
        "panic", "anxiety", "scared", "nervous", "breathe",
        "pressure", "fail", "worry", "stress", "attack",
    ],
    Category.SELF_HARM_RISK: [
        "suicide", "end", "die", "kill", "goodbye",
        "overdose", "cutting", "hang", "rope", "gun",
    ],
    Category.FUNCTIONAL_BASELINE: [
        "work", "hobby", "job", "game", "movie", "book", "code",
        "run", "gym", "cook", "friend", "happy", "cool",
    ],
}


def category_key(category) -> str:
    """Plain string key for a Category member or raw string."""
    return category.value if isinstance(category, Category) else str(category)


# ============================================================================
# LEXICON
# ============================================================================

class CategoryLexicon:
    """
    Immutable, ordered mapping of category → query tokens.

    Args:
        entries: Mapping of category (Category or str) to normalized tokens.
            Insertion order becomes the declaration order.
        hard_evidence_category: Category scored as a binary lexical hit
            instead of the continuous ensemble (None disables the override)

    Raises:
        LexiconError: On an empty lexicon, a category with no tokens, or a
            hard-evidence category missing from the entries
    """

    __slots__ = ("_tokens", "_term_sets", "_hard_evidence_category")

    def __init__(
        self,
        entries: Mapping,
        hard_evidence_category=None,
    ):
        if not entries:
            raise LexiconError("Category lexicon must contain at least one category")

        tokens: Dict[str, Tuple[str, ...]] = {}
        for category, category_tokens in entries.items():
            key = category_key(category)
            if key == NONE_CATEGORY:
                raise LexiconError(f"'{NONE_CATEGORY}' is reserved for the no-category sentinel")
            if key in tokens:
                raise LexiconError(f"Duplicate category in lexicon: {key}")
            category_tokens = tuple(category_tokens)
            if not category_tokens:
                raise LexiconError(f"Category {key} has no lexicon tokens")
            tokens[key] = category_tokens

        hard_key = category_key(hard_evidence_category) if hard_evidence_category is not None else None
        if hard_key is not None and hard_key not in tokens:
            raise LexiconError(f"Hard-evidence category {hard_key} has no lexicon entry")

        self._tokens = MappingProxyType(tokens)
        self._term_sets = MappingProxyType({k: frozenset(v) for k, v in tokens.items()})
        self._hard_evidence_category = hard_key

    @classmethod
    def from_vocabulary(
        cls,
        vocabulary: Mapping,
        tokenizer: Callable[[str], List[str]] = tokenize,
        hard_evidence_category=None,
    ) -> "CategoryLexicon":
        """
        Build a lexicon from raw vocabulary words.

        Each word goes through the same tokenizer as the posts so lexicon
        tokens and post tokens share one normalized space.
        """
        entries = {}
        for category, words in vocabulary.items():
            category_tokens: List[str] = []
            for word in words:
                category_tokens.extend(tokenizer(word))
            entries[category] = category_tokens

        return cls(
            entries,
            hard_evidence_category=hard_evidence_category,
        )

    @property
    def categories(self) -> Tuple[str, ...]:
        """Category keys in declaration order."""
        return tuple(self._tokens)

    @property
    def hard_evidence_category(self) -> Optional[str]:
        return self._hard_evidence_category

    def tokens(self, category) -> Tuple[str, ...]:
        return self._tokens[category_key(category)]

    def term_set(self, category) -> FrozenSet[str]:
        return self._term_sets[category_key(category)]

    def require(self, categories: Iterable[str]) -> None:
        """
        Fail loudly if any referenced category has no lexicon entry.

        Raises:
            UnknownCategoryError: Listing every unknown category
        """
        unknown = {category_key(c) for c in categories} - set(self._tokens)
        if unknown:
            raise UnknownCategoryError(unknown)

    def items(self) -> Iterator[Tuple[str, Tuple[str, ...]]]:
        return iter(self._tokens.items())

    def __contains__(self, category) -> bool:
        return category_key(category) in self._tokens

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        return (
            f"<CategoryLexicon(categories={list(self._tokens)}, "
            f"hard_evidence={self._hard_evidence_category})>"
        )


@lru_cache(maxsize=1)
def build_default_lexicon() -> CategoryLexicon:
    """
    Default process-wide lexicon built from DEFAULT_VOCABULARY.

    Cached: the first call builds it, later calls return the same object.
    """
    return CategoryLexicon.from_vocabulary(
        DEFAULT_VOCABULARY,
        hard_evidence_category=Category.SELF_HARM_RISK,
    )


def ordered_scores(lexicon: CategoryLexicon, scores: Mapping[str, float]) -> Dict[str, float]:
    """Re-key a score mapping in lexicon declaration order, missing categories as 0.0."""
    return {category: float(scores.get(category, 0.0)) for category in lexicon.categories}
