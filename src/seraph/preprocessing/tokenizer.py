"""
English tokenizer for social-media posts.

Tokenization pipeline:
1. Lowercase conversion
2. Extract words (alphanumeric, internal apostrophes and hyphens preserved)
3. Strip possessive "'s"
4. Filter stopwords and pure numbers
5. Snowball stemming ("crying" → "cri", "depressed" → "depress")

Deterministic and side-effect free: same text always yields the same tokens.
"""

import re
from typing import List, Optional

from nltk.stem.snowball import SnowballStemmer

from .stopwords import STOPWORDS_EN

# Version for audit trail
TOKENIZER_VERSION = "tokenizer-en-snowball-1.0.0"

_WORD_PATTERN = re.compile(r"[a-z0-9]+(?:['’\-][a-z0-9]+)*")
_NUMBER_PATTERN = re.compile(r"^[0-9\-]+$")

# Initialize stemmer once (thread-safe, reusable)
_stemmer = SnowballStemmer("english")


def stem(word: str) -> str:
    """
    Stem a single lowercase word using the Snowball algorithm.

    Examples:
        >>> stem("crying")
        'cri'
        >>> stem("depressed")
        'depress'
    """
    return _stemmer.stem(word)


def _strip_possessive(word: str) -> str:
    for suffix in ("'s", "’s"):
        if word.endswith(suffix):
            return word[: -len(suffix)]
    return word


def tokenize(text: Optional[str]) -> List[str]:
    """
    Tokenize post text into normalized tokens.

    Args:
        text: Raw post text; None is treated as empty

    Returns:
        Ordered list of stemmed tokens without stopwords or pure numbers

    Examples:
        >>> tokenize("I can't breathe, the pressure is too much!")
        ['i', "can't", 'breath', 'pressur', 'too', 'much']
        >>> tokenize("Ran 5 miles at the gym")
        ['ran', 'mile', 'gym']
        >>> tokenize(None)
        []
    """
    if not text:
        return []

    words = _WORD_PATTERN.findall(text.lower())

    tokens = []
    for word in words:
        word = _strip_possessive(word)
        if not word or word in STOPWORDS_EN or _NUMBER_PATTERN.match(word):
            continue
        tokens.append(stem(word))

    return tokens
