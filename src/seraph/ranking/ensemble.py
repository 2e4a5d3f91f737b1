"""
Ensemble fusion of the ranking signals.

Per document and category:

    ensemble = clamp01(w_vsm × tfidf + w_bm25 × bm25_normalized [+ w_semantic × semantic])

Two rules sit on top of the weighted sum:

- Evidence gating: a document with fewer than `min_evidence_tokens` tokens
  carries no evidence for any category. All its scores are 0.0 and it is
  flagged so aggregation skips it; it stays in the output.
- Hard-evidence override: the lexicon's hard-evidence category (self-harm
  risk) ignores the continuous signals and scores 1.0 if the document shares
  at least one token with that category's lexicon, else 0.0.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
import structlog

from ..config import settings
from ..models.document import Document
from .categories import CategoryLexicon
from .matrix import ScoreMatrix, align_matrix, clamp01

logger = structlog.get_logger(__name__)

DEFAULT_MIN_EVIDENCE_TOKENS = 5


@dataclass(frozen=True)
class EnsembleWeights:
    """
    Weights of each score source in the ensemble.

    VSM (TF-IDF cosine) and BM25 split evenly; the semantic source is off by default.
    """
    vsm: float = 0.5
    bm25: float = 0.5
    semantic: float = 0.0

    @classmethod
    def from_config(cls) -> "EnsembleWeights":
        """Load weights from settings."""
        return cls(
            vsm=settings.ensemble_weight_vsm,
            bm25=settings.ensemble_weight_bm25,
            semantic=settings.ensemble_weight_semantic,
        )

    @property
    def total(self) -> float:
        return self.vsm + self.bm25 + self.semantic

    def normalized(self) -> "EnsembleWeights":
        """
        Weights rescaled to sum to 1.0.

        Raises:
            ValueError: If a weight is negative or all weights are zero
        """
        if min(self.vsm, self.bm25, self.semantic) < 0.0:
            raise ValueError(f"Ensemble weights must be non-negative: {self}")
        total = self.total
        if total <= 0.0:
            raise ValueError("At least one ensemble weight must be positive")
        if np.isclose(total, 1.0):
            return self

        logger.warning(
            "ensemble_weights_do_not_sum_to_1",
            vsm=self.vsm,
            bm25=self.bm25,
            semantic=self.semantic,
            sum=total,
        )
        return EnsembleWeights(vsm=self.vsm / total, bm25=self.bm25 / total, semantic=self.semantic / total)

    def without_semantic(self) -> "EnsembleWeights":
        """Lexical-only weights, used when no semantic source ran."""
        if self.semantic == 0.0:
            return self
        return EnsembleWeights(vsm=self.vsm, bm25=self.bm25, semantic=0.0).normalized()


@dataclass(frozen=True)
class FusedDocument:
    """Fused category scores for one document, before category selection."""
    document_id: str
    scores: Dict[str, float]
    has_evidence: bool


class EnsembleFuser:
    """
    Combines per-source score matrices into one score per (document, category).
    """

    def __init__(
        self,
        weights: Optional[EnsembleWeights] = None,
        min_evidence_tokens: int = DEFAULT_MIN_EVIDENCE_TOKENS,
    ):
        self.weights = (weights or EnsembleWeights()).normalized()
        self.min_evidence_tokens = min_evidence_tokens

        self.logger = logger.bind(component="ensemble_fuser")

    def has_evidence(self, document: Document) -> bool:
        return document.length >= self.min_evidence_tokens

    def fuse(
        self,
        documents: Sequence[Document],
        lexicon: CategoryLexicon,
        tfidf: ScoreMatrix,
        bm25: ScoreMatrix,
        semantic: Optional[ScoreMatrix] = None,
    ) -> List[FusedDocument]:
        """
        Fuse score matrices for a batch.

        Args:
            documents: Batch documents, in matrix order
            lexicon: Category lexicon (keys, order, hard-evidence category)
            tfidf: TF-IDF cosine matrix
            bm25: Normalized BM25 matrix
            semantic: Optional third score source with the same contract

        Returns:
            One FusedDocument per input document, scores in [0, 1]

        Raises:
            UnknownCategoryError: If any matrix references a category outside the lexicon
        """
        size = len(documents)
        tfidf = align_matrix(tfidf, lexicon, size)
        bm25 = align_matrix(bm25, lexicon, size)

        if semantic is not None:
            semantic = align_matrix(semantic, lexicon, size)
            weights = self.weights
        else:
            weights = self.weights.without_semantic()

        hard_category = lexicon.hard_evidence_category
        fused: List[FusedDocument] = []
        gated_out = 0

        for index, document in enumerate(documents):
            if not self.has_evidence(document):
                gated_out += 1
                fused.append(FusedDocument(
                    document_id=document.document_id,
                    scores={category: 0.0 for category in lexicon.categories},
                    has_evidence=False,
                ))
                continue

            token_set = set(document.tokens)
            scores: Dict[str, float] = {}

            for category in lexicon.categories:
                if category == hard_category:
                    hit = not token_set.isdisjoint(lexicon.term_set(category))
                    scores[category] = 1.0 if hit else 0.0
                    continue

                value = weights.vsm * tfidf[category][index] + weights.bm25 * bm25[category][index]
                if semantic is not None:
                    value += weights.semantic * semantic[category][index]
                scores[category] = clamp01(value)

            fused.append(FusedDocument(
                document_id=document.document_id,
                scores=scores,
                has_evidence=True,
            ))

        self.logger.debug(
            "ensemble_fused",
            documents=size,
            gated_out=gated_out,
            semantic_enabled=semantic is not None,
        )

        return fused
