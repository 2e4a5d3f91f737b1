"""
Analysis entry point for one batch of posts.

Coordinates:
1. Corpus statistics
2. TF-IDF and BM25 scoring (plus an optional semantic source)
3. Ensemble fusion with evidence gating and hard-evidence override
4. Best-category selection
5. Profile aggregation

analyze() is a pure function of its inputs: the lexicon and engine config are
passed in explicitly, and every per-batch structure is created inside the call.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import structlog

from ..config import settings
from ..models.analysis import EnsembleRow, ProfileSummary
from ..models.document import Document, RawPost
from .aggregator import DEFAULT_CONFIDENCE_FLOOR, ProfileAggregator
from .bm25 import DEFAULT_B, DEFAULT_K1, Bm25Ranker
from .categories import CategoryLexicon
from .corpus import build_corpus_statistics
from .ensemble import DEFAULT_MIN_EVIDENCE_TOKENS, EnsembleFuser, EnsembleWeights
from .matrix import ScoreMatrix, clamp01
from .selector import SelectionThresholds, select_best_category
from .semantic import ScoreSource
from .tfidf import TfidfRanker

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """
    Immutable tuning of the ranking engine.

    Built once (usually from settings) and shared read-only by all batches.
    """
    weights: EnsembleWeights = field(default_factory=EnsembleWeights)
    thresholds: SelectionThresholds = field(default_factory=SelectionThresholds)
    k1: float = DEFAULT_K1
    b: float = DEFAULT_B
    lower_percentile: float = 10.0
    upper_percentile: float = 90.0
    min_evidence_tokens: int = DEFAULT_MIN_EVIDENCE_TOKENS
    confidence_floor: float = DEFAULT_CONFIDENCE_FLOOR

    @classmethod
    def from_config(cls) -> "EngineConfig":
        """Load engine tuning from settings."""
        return cls(
            weights=EnsembleWeights.from_config(),
            thresholds=SelectionThresholds.from_config(),
            k1=settings.bm25_k1,
            b=settings.bm25_b,
            lower_percentile=settings.normalization_lower_percentile,
            upper_percentile=settings.normalization_upper_percentile,
            min_evidence_tokens=settings.min_evidence_tokens,
            confidence_floor=settings.confidence_floor,
        )


@dataclass(frozen=True)
class AnalysisOutcome:
    """Per-document rows and the profile summary of one run."""
    rows: List[EnsembleRow]
    summary: ProfileSummary


def analyze(
    subject_id: str,
    documents: Sequence[Document],
    lexicon: CategoryLexicon,
    config: Optional[EngineConfig] = None,
    platform: str = "reddit",
    semantic_scores: Optional[ScoreMatrix] = None,
) -> AnalysisOutcome:
    """
    Rank a batch of documents against the category lexicon.

    Args:
        subject_id: Profile identifier (username)
        documents: Tokenized documents of one profile
        lexicon: Category lexicon
        config: Engine tuning (default: EngineConfig())
        platform: Platform tag recorded on the summary
        semantic_scores: Optional third score source output, same contract
            as the lexical rankers

    Returns:
        AnalysisOutcome with one EnsembleRow per document (input order) and
        the ProfileSummary

    Raises:
        UnknownCategoryError: If semantic_scores references a category with no lexicon entry
    """
    config = config or EngineConfig()
    aggregator = ProfileAggregator(confidence_floor=config.confidence_floor)

    if not documents:
        logger.info("analysis_empty_batch", username=subject_id, platform=platform)
        return AnalysisOutcome(rows=[], summary=aggregator.empty_summary(subject_id, platform))

    # Programmer errors fail before any scoring work
    if semantic_scores is not None:
        lexicon.require(semantic_scores.keys())

    start_time = time.time()
    token_sequences = [document.tokens for document in documents]

    stats = build_corpus_statistics(token_sequences)

    tfidf_matrix = TfidfRanker().score(token_sequences, lexicon, stats)
    bm25_matrix = Bm25Ranker(
        k1=config.k1,
        b=config.b,
        lower_percentile=config.lower_percentile,
        upper_percentile=config.upper_percentile,
    ).score(token_sequences, lexicon, stats)

    fuser = EnsembleFuser(weights=config.weights, min_evidence_tokens=config.min_evidence_tokens)
    fused = fuser.fuse(documents, lexicon, tfidf_matrix, bm25_matrix, semantic=semantic_scores)

    rows: List[EnsembleRow] = []
    for item in fused:
        selection = select_best_category(item.scores, lexicon.categories, config.thresholds)
        rows.append(EnsembleRow(
            document_id=item.document_id,
            scores=item.scores,
            best_category=selection.category,
            best_score=clamp01(selection.score),
            has_evidence=item.has_evidence,
        ))

    summary = aggregator.aggregate(rows, lexicon, username=subject_id, platform=platform)

    logger.info(
        "analysis_completed",
        username=subject_id,
        platform=platform,
        documents=len(documents),
        top_category=summary.top_category_overall,
        processing_time_ms=round((time.time() - start_time) * 1000, 2),
    )

    return AnalysisOutcome(rows=rows, summary=summary)


def analyze_posts(
    subject_id: str,
    posts: Sequence[RawPost],
    lexicon: CategoryLexicon,
    config: Optional[EngineConfig] = None,
    platform: str = "reddit",
    score_source: Optional[ScoreSource] = None,
) -> AnalysisOutcome:
    """
    Tokenize raw posts and analyze them.

    Posts with a missing body are analyzed on their title alone; posts with
    no text at all become empty documents and fail evidence gating.
    """
    documents = [Document.from_post(post) for post in posts]

    semantic_scores = None
    if score_source is not None and documents:
        semantic_scores = score_source.score([post.full_text for post in posts])

    return analyze(
        subject_id,
        documents,
        lexicon,
        config=config,
        platform=platform,
        semantic_scores=semantic_scores,
    )
