"""
TF-IDF vector space ranker.

Scores every (document, category) pair by cosine similarity between sparse
TF-IDF vectors. IDF comes from the batch's own document corpus:

    idf(term) = ln((N + 1) / (df + 1)) + 1

The smoothing keeps idf positive when df = N and bounded as df → 0. Category
query terms that never occur in the corpus have no IDF and are dropped from
the query vector. Both vectors are non-negative, so cosine lies in [0, 1].
"""

import math
from collections import Counter
from typing import Dict, Mapping, Sequence

import structlog

from .categories import CategoryLexicon
from .corpus import CorpusStatistics
from .matrix import ScoreMatrix, clamp01

logger = structlog.get_logger(__name__)

SparseVector = Dict[str, float]


def smoothed_idf(document_frequency: int, document_count: int) -> float:
    return math.log((document_count + 1.0) / (document_frequency + 1.0)) + 1.0


def build_idf_table(stats: CorpusStatistics) -> Dict[str, float]:
    """IDF weight for every term seen in the batch."""
    n = stats.document_count
    return {term: smoothed_idf(df, n) for term, df in stats.document_frequency.items()}


def tfidf_vector(tokens: Sequence[str], idf: Mapping[str, float]) -> SparseVector:
    """
    Sparse TF-IDF vector: raw term count × idf for each distinct term.

    Terms missing from the IDF table are dropped, not zero-filled.
    """
    vector: SparseVector = {}
    for term, tf in Counter(tokens).items():
        weight = idf.get(term)
        if weight is None:
            continue
        vector[term] = tf * weight
    return vector


def cosine_similarity(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    """
    Cosine similarity over the sparse intersection of two vectors.

    Returns 0.0 when either vector is empty or has a zero norm.
    """
    if not a or not b:
        return 0.0

    # Iterate the smaller vector for the dot product
    small, large = (a, b) if len(a) <= len(b) else (b, a)
    dot = 0.0
    for term, weight in small.items():
        other = large.get(term)
        if other is not None:
            dot += weight * other

    norm_a = math.sqrt(sum(v * v for v in a.values()))
    norm_b = math.sqrt(sum(v * v for v in b.values()))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return clamp01(dot / (norm_a * norm_b))


class TfidfRanker:
    """
    Vector space model ranker over one batch.

    Stateless between calls; all per-batch state lives inside score().
    """

    def score(
        self,
        token_sequences: Sequence[Sequence[str]],
        lexicon: CategoryLexicon,
        stats: CorpusStatistics,
    ) -> ScoreMatrix:
        """
        Cosine score for every (document, category) pair.

        Args:
            token_sequences: Document tokens, in batch order
            lexicon: Category lexicon (query tokens per category)
            stats: Corpus statistics of this batch

        Returns:
            ScoreMatrix with values in [0, 1]
        """
        idf = build_idf_table(stats)
        document_vectors = [tfidf_vector(tokens, idf) for tokens in token_sequences]

        matrix: ScoreMatrix = {}
        for category, query_tokens in lexicon.items():
            query_vector = tfidf_vector(query_tokens, idf)
            matrix[category] = [cosine_similarity(dv, query_vector) for dv in document_vectors]

        logger.debug(
            "tfidf_scored",
            documents=len(document_vectors),
            categories=len(matrix),
            vocabulary_size=len(idf),
        )

        return matrix
