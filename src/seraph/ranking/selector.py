"""
Best-category selection for a single document.

Decision rule (strict comparisons):
- best < absolute threshold          → "NONE", score max(best, 0.0)
- best - runner-up < margin threshold → "NONE" (ambiguous), score best
- otherwise                           → best category, score best

Categories are visited in lexicon declaration order; on equal scores the
first one seen wins.
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from ..config import settings
from .categories import NONE_CATEGORY


@dataclass(frozen=True)
class SelectionThresholds:
    """Absolute and margin thresholds for accepting a winning category."""
    absolute: float = 0.20
    margin: float = 0.03

    @classmethod
    def from_config(cls) -> "SelectionThresholds":
        """Load thresholds from settings."""
        return cls(
            absolute=settings.selection_absolute_threshold,
            margin=settings.selection_margin_threshold,
        )


@dataclass(frozen=True)
class Selection:
    category: str
    score: float


def select_best_category(
    scores: Mapping[str, float],
    order: Optional[Sequence[str]] = None,
    thresholds: Optional[SelectionThresholds] = None,
) -> Selection:
    """
    Pick the winning category for one document.

    Args:
        scores: Category → ensemble score
        order: Iteration order (defaults to the mapping's own order)
        thresholds: Absolute/margin thresholds (default 0.20 / 0.03)

    Returns:
        Selection with the winning category or the "NONE" sentinel

    Examples:
        >>> select_best_category({"A": 0.25, "B": 0.22})
        Selection(category='A', score=0.25)
        >>> select_best_category({"A": 0.19})
        Selection(category='NONE', score=0.19)
    """
    thresholds = thresholds or SelectionThresholds()
    categories = order if order is not None else list(scores)

    best_category = None
    best = float("-inf")
    second = float("-inf")

    for category in categories:
        value = scores.get(category, 0.0)
        if value > best:
            second = best
            best = value
            best_category = category
        elif value > second:
            second = value

    if best_category is None:
        return Selection(category=NONE_CATEGORY, score=0.0)

    if second == float("-inf"):
        second = 0.0

    if best < thresholds.absolute:
        return Selection(category=NONE_CATEGORY, score=max(best, 0.0))

    if (best - second) < thresholds.margin:
        return Selection(category=NONE_CATEGORY, score=best)

    return Selection(category=best_category, score=best)
