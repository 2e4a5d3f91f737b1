"""
Corpus statistics for one analysis batch.

Built once per batch from every document's tokens and shared by the TF-IDF and
BM25 rankers of that batch only. A new batch always rebuilds from scratch.
"""

from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

import structlog

logger = structlog.get_logger(__name__)

# avgdl floor: BM25 divides by it
MIN_AVERAGE_DOCUMENT_LENGTH = 1.0


@dataclass(frozen=True)
class CorpusStatistics:
    """Document frequency table, document count and average document length."""
    document_frequency: Mapping[str, int]
    document_count: int
    average_document_length: float

    def df(self, term: str) -> int:
        return self.document_frequency.get(term, 0)


def build_corpus_statistics(token_sequences: Sequence[Sequence[str]]) -> CorpusStatistics:
    """
    Compute corpus statistics for a batch of token sequences.

    Duplicate tokens inside one document count once towards document
    frequency. Average length is floored at 1.0, also for an empty batch
    (callers are expected to short-circuit empty batches before ranking).

    Args:
        token_sequences: One token sequence per document

    Returns:
        Immutable CorpusStatistics

    Examples:
        >>> stats = build_corpus_statistics([["sad", "sad", "cri"], ["gym"]])
        >>> stats.df("sad"), stats.document_count, stats.average_document_length
        (1, 2, 2.0)
    """
    document_frequency: Counter = Counter()
    total_length = 0

    for tokens in token_sequences:
        document_frequency.update(set(tokens))
        total_length += len(tokens)

    document_count = len(token_sequences)
    average_length = total_length / document_count if document_count else 0.0
    average_length = max(average_length, MIN_AVERAGE_DOCUMENT_LENGTH)

    logger.debug(
        "corpus_statistics_built",
        document_count=document_count,
        vocabulary_size=len(document_frequency),
        average_document_length=round(average_length, 3),
    )

    return CorpusStatistics(
        document_frequency=MappingProxyType(dict(document_frequency)),
        document_count=document_count,
        average_document_length=average_length,
    )
