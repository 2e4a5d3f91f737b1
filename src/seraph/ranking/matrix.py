"""
Score matrix helpers shared by every score source.

A score matrix maps category → list of per-document scores, index-aligned
with the document batch. Every lexicon category has an entry of exactly the
batch size; missing or short values are 0.0, never None.
"""

import math
from typing import Dict, List, Mapping, Optional, Sequence

from .categories import CategoryLexicon

ScoreMatrix = Dict[str, List[float]]


def clamp01(value: float) -> float:
    """Clamp to [0.0, 1.0]; NaN collapses to 0.0."""
    if value != value:  # NaN
        return 0.0
    return min(1.0, max(0.0, value))


def empty_matrix(lexicon: CategoryLexicon, size: int) -> ScoreMatrix:
    return {category: [0.0] * size for category in lexicon.categories}


def _finite_or_zero(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    value = float(value)
    return value if math.isfinite(value) else 0.0


def align_matrix(
    matrix: Optional[Mapping[str, Sequence[Optional[float]]]],
    lexicon: CategoryLexicon,
    size: int,
) -> ScoreMatrix:
    """
    Conform a score matrix to the lexicon and batch size.

    Args:
        matrix: Raw category → scores mapping from any score source (None = empty)
        lexicon: Category lexicon defining the required keys and order
        size: Batch size

    Returns:
        ScoreMatrix with every lexicon category, each list of length `size`,
        padded (or truncated) with 0.0; None and non-finite values become 0.0

    Raises:
        UnknownCategoryError: If the matrix contains a category absent from the lexicon
    """
    if not matrix:
        return empty_matrix(lexicon, size)

    lexicon.require(matrix.keys())

    aligned: ScoreMatrix = {}
    for category in lexicon.categories:
        values = [_finite_or_zero(v) for v in list(matrix.get(category, ()))[:size]]
        values.extend([0.0] * (size - len(values)))
        aligned[category] = values

    return aligned
