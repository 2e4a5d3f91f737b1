"""
Profile-level aggregation of per-post ensemble rows.

- Totals: per-category sum of ensemble scores over evidence-bearing rows only
- Percentages: totals / total mass, or all 0.0 when the mass is ~0
- Top category: highest total, "NONE" when that total is ~0
- Confidence: clamp01((average best score - 0.15) / 0.85)

Stored rows come back from the snapshot store as JSON payloads. Parsing them
is an explicit fallible step (ScorePayloadResult); rows whose payload does
not parse are skipped, logged, and never contribute.
"""

import json
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from ..models.analysis import EnsembleRow, ProfileSummary
from .categories import CategoryLexicon, NONE_CATEGORY, ordered_scores
from .matrix import clamp01
from .selector import SelectionThresholds, select_best_category

logger = structlog.get_logger(__name__)

MASS_EPSILON = 1e-9
DEFAULT_CONFIDENCE_FLOOR = 0.15


# ============================================================================
# STORED PAYLOADS
# ============================================================================

@dataclass(frozen=True)
class ScorePayloadResult:
    """Outcome of parsing one stored per-post score payload."""
    ok: bool
    scores: Dict[str, float] = field(default_factory=dict)
    has_evidence: bool = True
    error: Optional[str] = None


def serialize_score_payload(row: EnsembleRow) -> str:
    """JSON payload stored alongside each analyzed post."""
    return json.dumps({"scores": row.scores, "has_evidence": row.has_evidence})


def parse_score_payload(payload: Optional[str]) -> ScorePayloadResult:
    """
    Parse a stored score payload.

    Accepts {"scores": {...}, "has_evidence": bool} or a bare
    {category: score} mapping (treated as evidence-bearing).

    Returns:
        ScorePayloadResult with ok=False and an error message on any malformed input
    """
    if payload is None or not payload.strip():
        return ScorePayloadResult(ok=False, error="empty payload")

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        return ScorePayloadResult(ok=False, error=f"invalid JSON: {e.msg}")

    if not isinstance(data, dict):
        return ScorePayloadResult(ok=False, error="payload is not an object")

    has_evidence = True
    if "scores" in data:
        has_evidence = data.get("has_evidence", True)
        data = data["scores"]
        if not isinstance(data, dict) or not isinstance(has_evidence, bool):
            return ScorePayloadResult(ok=False, error="malformed scores object")

    scores: Dict[str, float] = {}
    for category, value in data.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return ScorePayloadResult(ok=False, error=f"non-numeric score for {category}")
        scores[str(category)] = float(value)

    return ScorePayloadResult(ok=True, scores=scores, has_evidence=has_evidence)


def rows_from_payloads(
    payloads: Sequence[Tuple[str, Optional[str]]],
    lexicon: CategoryLexicon,
    thresholds: Optional[SelectionThresholds] = None,
) -> Tuple[List[EnsembleRow], List[str]]:
    """
    Rebuild ensemble rows from stored (document_id, payload) pairs.

    Returns:
        (rows, skipped_document_ids). Skipped documents had unparseable payloads.

    Raises:
        UnknownCategoryError: If a parsed payload names a category outside the lexicon
    """
    rows: List[EnsembleRow] = []
    skipped: List[str] = []

    for document_id, payload in payloads:
        result = parse_score_payload(payload)
        if not result.ok:
            logger.warning("score_payload_skipped", document_id=document_id, error=result.error)
            skipped.append(document_id)
            continue

        lexicon.require(result.scores.keys())
        scores = {k: clamp01(v) for k, v in ordered_scores(lexicon, result.scores).items()}
        selection = select_best_category(scores, lexicon.categories, thresholds)
        rows.append(EnsembleRow(
            document_id=document_id,
            scores=scores,
            best_category=selection.category,
            best_score=clamp01(selection.score),
            has_evidence=result.has_evidence,
        ))

    return rows, skipped


# ============================================================================
# AGGREGATION
# ============================================================================

def shape_confidence(average_best_score: float, floor: float = DEFAULT_CONFIDENCE_FLOOR) -> float:
    """Map an average best score of `floor` to 0.0 and 1.0 to 1.0, linearly."""
    if floor >= 1.0:
        return 0.0
    return clamp01((average_best_score - floor) / (1.0 - floor))


class ProfileAggregator:
    """
    Turns the ensemble rows of one batch into a ProfileSummary.
    """

    def __init__(self, confidence_floor: float = DEFAULT_CONFIDENCE_FLOOR):
        self.confidence_floor = confidence_floor

    def empty_summary(self, username: str, platform: str) -> ProfileSummary:
        """Well-formed summary for a batch with no documents."""
        return ProfileSummary(
            platform=platform,
            username=username,
            post_count=0,
            evidence_post_count=0,
            profile_totals={},
            profile_percentages={},
            top_category_overall=NONE_CATEGORY,
            confidence=0.0,
        )

    def aggregate(
        self,
        rows: Sequence[EnsembleRow],
        lexicon: CategoryLexicon,
        username: str,
        platform: str,
        post_count: Optional[int] = None,
    ) -> ProfileSummary:
        """
        Aggregate rows into a profile summary.

        Args:
            rows: Ensemble rows of the batch (gated rows are skipped)
            lexicon: Category lexicon (keys and tie-break order)
            username: Subject identifier
            platform: Platform tag
            post_count: Reported post count (defaults to len(rows))

        Returns:
            ProfileSummary
        """
        if not rows:
            return self.empty_summary(username, platform)
        if post_count is None:
            post_count = len(rows)

        totals: Dict[str, float] = {category: 0.0 for category in lexicon.categories}
        evidence_rows = [row for row in rows if row.has_evidence]

        for row in evidence_rows:
            for category in lexicon.categories:
                totals[category] += row.scores.get(category, 0.0)

        total_mass = sum(totals.values())
        if total_mass > MASS_EPSILON:
            percentages = {category: value / total_mass for category, value in totals.items()}
        else:
            percentages = {category: 0.0 for category in totals}

        top_category = NONE_CATEGORY
        top_total = 0.0
        for category, value in totals.items():
            if value > top_total:
                top_category, top_total = category, value
        if top_total <= MASS_EPSILON:
            top_category = NONE_CATEGORY

        if evidence_rows:
            average_best = sum(row.best_score for row in evidence_rows) / len(evidence_rows)
        else:
            average_best = 0.0
        confidence = shape_confidence(average_best, self.confidence_floor)

        logger.info(
            "profile_aggregated",
            username=username,
            platform=platform,
            post_count=post_count,
            evidence_posts=len(evidence_rows),
            top_category=top_category,
            confidence=round(confidence, 4),
        )

        return ProfileSummary(
            platform=platform,
            username=username,
            post_count=post_count,
            evidence_post_count=len(evidence_rows),
            profile_totals=totals,
            profile_percentages=percentages,
            top_category_overall=top_category,
            confidence=confidence,
        )
