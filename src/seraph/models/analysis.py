"""
Analysis result models.

EnsembleRow is the per-post ranking outcome; ProfileSummary is the per-profile
aggregate. Field names of ProfileSummary are part of the interchange contract
with the snapshot store and API consumers.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EnsembleRow(BaseModel):
    """Fused per-category scores and the selected category for one document."""

    document_id: str = Field(description="Document identifier")
    scores: Dict[str, float] = Field(
        default_factory=dict, description="Category → ensemble score in [0, 1], lexicon order"
    )
    best_category: str = Field(description="Selected category or the 'NONE' sentinel")
    best_score: float = Field(ge=0.0, le=1.0, description="Score reported by the selector")
    has_evidence: bool = Field(
        description="False when the document failed evidence gating (excluded from aggregation)"
    )

    model_config = {"frozen": True}


class ProfileSummary(BaseModel):
    """Profile-level aggregate of one analysis run."""

    analysis_id: Optional[int] = Field(default=None, description="Snapshot id once persisted")
    platform: str = Field(description="Source platform tag, e.g. 'reddit' or 'simulation'")
    username: str = Field(description="Analyzed subject identifier")
    post_count: int = Field(ge=0, description="Number of analyzed posts")
    evidence_post_count: int = Field(default=0, ge=0, description="Posts that passed evidence gating")
    profile_totals: Dict[str, float] = Field(
        default_factory=dict, description="Sum of ensemble scores per category"
    )
    profile_percentages: Dict[str, float] = Field(
        default_factory=dict, description="Totals normalized to sum to 1.0 (or all 0.0)"
    )
    top_category_overall: str = Field(description="Category with the highest total, or 'NONE'")
    confidence: float = Field(ge=0.0, le=1.0, description="Shaped profile confidence")
    created_at: datetime = Field(default_factory=_utcnow, description="Analysis time (UTC)")

    model_config = {"frozen": True}


class PostResult(BaseModel):
    """A fetched post together with its ranking outcome, as returned to callers."""

    post_id: str
    title: Optional[str] = None
    content: Optional[str] = None
    permalink: str = ""
    created_utc: int = 0
    scores: Dict[str, float] = Field(default_factory=dict)
    best_category: str
    best_score: float = Field(ge=0.0, le=1.0)
    has_evidence: bool


class AnalysisResult(BaseModel):
    """Summary plus per-post results of one analysis (fresh or from a snapshot)."""

    summary: ProfileSummary
    posts: List[PostResult] = Field(default_factory=list)
    cached: bool = Field(default=False, description="True when served from a stored snapshot")
