"""
Lexical ranking engine.

Public API for scoring a profile's posts against the category lexicon:
TF-IDF cosine and BM25 rankers, ensemble fusion, best-category selection
and profile aggregation.
"""

from .aggregator import ProfileAggregator, parse_score_payload, rows_from_payloads, serialize_score_payload
from .bm25 import Bm25Ranker, robust_normalize
from .categories import NONE_CATEGORY, Category, CategoryLexicon, build_default_lexicon
from .corpus import CorpusStatistics, build_corpus_statistics
from .engine import AnalysisOutcome, EngineConfig, analyze, analyze_posts
from .ensemble import EnsembleFuser, EnsembleWeights
from .selector import Selection, SelectionThresholds, select_best_category
from .semantic import EmbeddingRanker, ScoreSource
from .tfidf import TfidfRanker, cosine_similarity

__all__ = [
    "analyze",
    "analyze_posts",
    "AnalysisOutcome",
    "EngineConfig",
    "Category",
    "CategoryLexicon",
    "NONE_CATEGORY",
    "build_default_lexicon",
    "CorpusStatistics",
    "build_corpus_statistics",
    "TfidfRanker",
    "cosine_similarity",
    "Bm25Ranker",
    "robust_normalize",
    "EnsembleFuser",
    "EnsembleWeights",
    "Selection",
    "SelectionThresholds",
    "select_best_category",
    "ProfileAggregator",
    "parse_score_payload",
    "rows_from_payloads",
    "serialize_score_payload",
    "EmbeddingRanker",
    "ScoreSource",
]
