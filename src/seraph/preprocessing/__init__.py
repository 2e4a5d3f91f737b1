"""
Text preprocessing for social-media posts.

Turns raw post text into the normalized token sequences the ranking engine
consumes. The ranking engine never re-tokenizes.
"""

from .tokenizer import TOKENIZER_VERSION, tokenize, stem
from .stopwords import STOPLIST_VERSION, STOPWORDS_EN

__all__ = [
    "tokenize",
    "stem",
    "TOKENIZER_VERSION",
    "STOPLIST_VERSION",
    "STOPWORDS_EN",
]
