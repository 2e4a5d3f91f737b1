"""
BM25 ranker with batch-relative robust normalization.

Formula:
    score(term, doc) = idf(term) × (tf × (k1 + 1)) / (tf + k1 × (1 - b + b × dl/avgdl))
    idf(term)        = ln(1 + (N - df + 0.5) / (df + 0.5))

Where:
    tf    = term frequency in document
    k1    = term frequency saturation (1.5)
    b     = length normalization (0.75)
    dl    = document length (tokens)
    avgdl = average document length of the batch

Raw BM25 is unbounded and not comparable with cosine scores, so each category
column is rescaled with its own 10th/90th percentiles:

    v → clamp01((v - p10) / (p90 - p10))

A flat column (p90 - p10 within epsilon) becomes all 0.0. The same raw score
can normalize differently in another batch; BM25 IDF is not calibrated across
independent runs.
"""

import math
from collections import Counter
from typing import List, Mapping, Sequence

import numpy as np
import structlog

from .categories import CategoryLexicon
from .corpus import CorpusStatistics
from .matrix import ScoreMatrix

logger = structlog.get_logger(__name__)

DEFAULT_K1 = 1.5
DEFAULT_B = 0.75
FLAT_COLUMN_EPSILON = 1e-9


def bm25_idf(document_frequency: int, document_count: int) -> float:
    """Classic BM25 IDF; near zero for terms present in most documents."""
    return math.log(1.0 + (document_count - document_frequency + 0.5) / (document_frequency + 0.5))


def robust_normalize(
    values: Sequence[float],
    lower_percentile: float = 10.0,
    upper_percentile: float = 90.0,
) -> List[float]:
    """
    Percentile-based rescaling of one score column into [0, 1].

    Percentiles use linear interpolation between order statistics.

    Args:
        values: Raw scores of one category across the batch
        lower_percentile: Percentile mapped to 0.0
        upper_percentile: Percentile mapped to 1.0

    Returns:
        Normalized scores, all 0.0 if the column is flat

    Examples:
        >>> robust_normalize([0.0, 0.0, 2.0])
        [0.0, 0.0, 1.0]
        >>> robust_normalize([3.0, 3.0, 3.0])
        [0.0, 0.0, 0.0]
    """
    if len(values) == 0:
        return []

    column = np.asarray(values, dtype=float)
    low, high = np.percentile(column, [lower_percentile, upper_percentile])
    spread = high - low

    if spread <= FLAT_COLUMN_EPSILON:
        return [0.0] * len(column)

    normalized = np.clip((column - low) / spread, 0.0, 1.0)
    return [float(v) for v in normalized]


class Bm25Ranker:
    """
    BM25 ranker scoring each category's query against every document of a batch.
    """

    def __init__(
        self,
        k1: float = DEFAULT_K1,
        b: float = DEFAULT_B,
        lower_percentile: float = 10.0,
        upper_percentile: float = 90.0,
    ):
        """
        Initialize BM25 ranker.

        Args:
            k1: Term frequency saturation parameter
            b: Length normalization parameter (0.0 - 1.0)
            lower_percentile: Percentile mapped to 0.0 by normalization
            upper_percentile: Percentile mapped to 1.0 by normalization
        """
        self.k1 = k1
        self.b = b
        self.lower_percentile = lower_percentile
        self.upper_percentile = upper_percentile

    def score_document(
        self,
        query_terms: Sequence[str],
        term_frequencies: Mapping[str, int],
        document_length: int,
        stats: CorpusStatistics,
    ) -> float:
        """
        Raw BM25 score of one document for one query.

        Only distinct query terms that occur in the document contribute.
        """
        if not query_terms or not term_frequencies:
            return 0.0

        length_norm = 1.0 - self.b + self.b * (document_length / stats.average_document_length)
        score = 0.0

        for term in dict.fromkeys(query_terms):
            tf = term_frequencies.get(term, 0)
            if tf == 0:
                continue

            idf = bm25_idf(stats.df(term), stats.document_count)
            score += idf * (tf * (self.k1 + 1.0)) / (tf + self.k1 * length_norm)

        return score

    def score_raw(
        self,
        token_sequences: Sequence[Sequence[str]],
        lexicon: CategoryLexicon,
        stats: CorpusStatistics,
    ) -> ScoreMatrix:
        """Unnormalized BM25 for every (document, category) pair."""
        frequencies = [Counter(tokens) for tokens in token_sequences]
        lengths = [len(tokens) for tokens in token_sequences]

        matrix: ScoreMatrix = {}
        for category, query_tokens in lexicon.items():
            matrix[category] = [
                self.score_document(query_tokens, tf, dl, stats)
                for tf, dl in zip(frequencies, lengths)
            ]
        return matrix

    def normalize(self, raw: ScoreMatrix) -> ScoreMatrix:
        """Robust-normalize every category column independently."""
        return {
            category: robust_normalize(values, self.lower_percentile, self.upper_percentile)
            for category, values in raw.items()
        }

    def score(
        self,
        token_sequences: Sequence[Sequence[str]],
        lexicon: CategoryLexicon,
        stats: CorpusStatistics,
    ) -> ScoreMatrix:
        """
        Normalized BM25 for every (document, category) pair.

        Returns:
            ScoreMatrix with values in [0, 1]
        """
        raw = self.score_raw(token_sequences, lexicon, stats)
        normalized = self.normalize(raw)

        logger.debug(
            "bm25_scored",
            documents=len(token_sequences),
            categories=len(normalized),
            flat_columns=sum(1 for values in normalized.values() if not any(values)),
        )

        return normalized
