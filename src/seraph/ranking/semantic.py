"""
Optional semantic score source based on sentence embeddings.

Any score source honours the same contract as the lexical rankers:
score(texts) returns category → per-document score in [0, 1], index-aligned
with the texts. The embedding ranker compares each post with one anchor
sentence per category using sentence-transformers.

Requires the `embeddings` extra (sentence-transformers). The model loads on
first use.
"""

from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional, Sequence

import numpy as np
import structlog

from ..config import settings
from .categories import Category, category_key
from .matrix import ScoreMatrix, clamp01

logger = structlog.get_logger(__name__)


DEFAULT_ANCHORS: Dict[Category, str] = {
    Category.SADNESS: "I feel overwhelmed with grief, hopelessness, and deep emotional pain that will not go away.",
    Category.HOSTILITY: "I hate everyone and want to violently hurt others or destroy things out of anger.",
    Category.ANXIETY_STRESS: "I am having a panic attack and cannot breathe because the pressure is too much.",
    Category.SELF_HARM_RISK: "I want to end my life and commit suicide because I cannot take this anymore.",
    Category.FUNCTIONAL_BASELINE: (
        "Content about daily life, hobbies, work, technology, news, "
        "or casual conversation without strong emotion."
    ),
}


class ScoreSource(ABC):
    """
    Abstract base class for additional score sources.

    All score sources must implement this interface to be fused with the
    lexical rankers.
    """

    @abstractmethod
    def score(self, texts: Sequence[str]) -> ScoreMatrix:
        """
        Score every text against every category.

        Args:
            texts: Raw post texts, in batch order

        Returns:
            ScoreMatrix with values in [0, 1]
        """

    @abstractmethod
    def get_model_info(self) -> dict:
        """
        Get information about the score source.

        Returns:
            Dict with keys: name, type, version
        """


def _cosine(a: np.ndarray, b: np.ndarray) -> float:
    norm = float(np.linalg.norm(a) * np.linalg.norm(b))
    if norm == 0.0:
        return 0.0
    return float(np.dot(a, b) / norm)


class EmbeddingRanker(ScoreSource):
    """
    Cosine similarity between post embeddings and category anchor embeddings.

    Negative cosine is clamped to 0.0. A post whose encoding fails scores
    0.0 for every category.
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        anchors: Optional[Mapping] = None,
        model=None,
    ):
        """
        Initialize embedding ranker.

        Args:
            model_name: sentence-transformers model identifier
            anchors: Category → anchor sentence (default: DEFAULT_ANCHORS)
            model: Pre-loaded encoder exposing encode(texts); skips lazy loading
        """
        self.model_name = model_name or settings.embedding_model_name
        self.anchors = {category_key(k): v for k, v in (anchors or DEFAULT_ANCHORS).items()}
        self.model = model
        self._anchor_vectors: Optional[Dict[str, np.ndarray]] = None

    def _ensure_loaded(self):
        """Lazy load model and pre-compute anchor vectors."""
        if self.model is None:
            logger.info("embedding_model_loading", model=self.model_name)
            from sentence_transformers import SentenceTransformer
            self.model = SentenceTransformer(self.model_name)

        if self._anchor_vectors is None:
            categories = list(self.anchors)
            vectors = self.model.encode([self.anchors[c] for c in categories])
            self._anchor_vectors = {
                category: np.asarray(vector, dtype=float)
                for category, vector in zip(categories, vectors)
            }

    def score(self, texts: Sequence[str]) -> ScoreMatrix:
        self._ensure_loaded()

        results: ScoreMatrix = {category: [] for category in self.anchors}
        failures = 0

        for text in texts:
            try:
                vector = np.asarray(self.model.encode([text or ""])[0], dtype=float)
            except Exception as e:
                failures += 1
                logger.warning("embedding_encode_failed", error=str(e))
                for category in results:
                    results[category].append(0.0)
                continue

            for category, anchor in self._anchor_vectors.items():
                results[category].append(clamp01(_cosine(vector, anchor)))

        logger.debug("embedding_scored", documents=len(texts), failures=failures)
        return results

    def get_model_info(self) -> dict:
        return {
            "name": self.model_name,
            "type": "sentence-embedding",
            "categories": list(self.anchors),
        }