"""
English stopword list used by the post tokenizer.

Same set as the Lucene/Elasticsearch English analyzer default.
"""

STOPLIST_VERSION = "stopwords-en-lucene-1.0"

STOPWORDS_EN = frozenset([
    "a", "an", "and", "are", "as", "at", "be", "but", "by",
    "for", "if", "in", "into", "is", "it",
    "no", "not", "of", "on", "or", "such",
    "that", "the", "their", "then", "there", "these",
    "they", "this", "to", "was", "will", "with",
])
