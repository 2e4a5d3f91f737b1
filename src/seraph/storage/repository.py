"""
Snapshot repository.

Writes and reads analysis snapshots. Every SQLAlchemy failure surfaces as
PersistenceError. Reads return plain records so callers never touch ORM
objects outside a session.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import PersistenceError
from ..models.analysis import EnsembleRow, ProfileSummary
from ..models.document import RawPost
from ..ranking.aggregator import parse_score_payload, serialize_score_payload
from .database import get_db_session
from .models import AnalyzedPost, ProfileAnalysis

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StoredAnalysis:
    """Header of a stored snapshot."""
    analysis_id: int
    platform: str
    username: str
    post_count: int
    top_category_overall: str
    confidence: float
    profile_totals: Dict[str, float]
    profile_percentages: Dict[str, float]
    created_at: datetime


@dataclass(frozen=True)
class StoredPost:
    """One stored post with its raw score payload."""
    post_id: str
    permalink: str
    title: Optional[str]
    content: Optional[str]
    created_utc: int
    scores_json: Optional[str]
    best_category: str
    best_score: float
    has_evidence: bool


def _as_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_summary_mapping(analysis_id: int, column: str, payload: Optional[str]) -> Dict[str, float]:
    """
    Parse a stored category → value column.

    A column that does not parse is logged and read as an empty map; the
    rest of the snapshot stays usable.
    """
    result = parse_score_payload(payload)
    if not result.ok:
        logger.warning(
            "snapshot_column_unparseable",
            analysis_id=analysis_id,
            column=column,
            error=result.error,
        )
        return {}
    return result.scores


def _to_stored_analysis(row: ProfileAnalysis) -> StoredAnalysis:
    return StoredAnalysis(
        analysis_id=row.id,
        platform=row.platform,
        username=row.username,
        post_count=row.post_count,
        top_category_overall=row.top_category_overall,
        confidence=row.confidence,
        profile_totals=_parse_summary_mapping(row.id, "profile_totals_json", row.profile_totals_json),
        profile_percentages=_parse_summary_mapping(
            row.id, "profile_percentages_json", row.profile_percentages_json
        ),
        created_at=_as_utc(row.created_at),
    )


class SnapshotRepository:
    """
    Persistence of analysis snapshots.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        """
        Args:
            session_factory: Session factory (default: global scoped factory)
        """
        self.session_factory = session_factory
        self.logger = logger.bind(component="snapshot_repository")

    def save_snapshot(
        self,
        summary: ProfileSummary,
        posts: Sequence[RawPost],
        rows: Sequence[EnsembleRow],
    ) -> int:
        """
        Store a summary and its posts in one transaction.

        Args:
            summary: Profile summary of the run
            posts: Fetched posts, index-aligned with rows
            rows: Ensemble rows of the run

        Returns:
            Id of the new snapshot

        Raises:
            PersistenceError: If the write fails (nothing is stored)
        """
        if len(posts) != len(rows):
            raise PersistenceError(
                f"Post/row count mismatch: {len(posts)} posts, {len(rows)} rows"
            )

        try:
            with get_db_session(self.session_factory) as session:
                analysis = ProfileAnalysis(
                    platform=summary.platform,
                    username=summary.username,
                    post_count=summary.post_count,
                    top_category_overall=summary.top_category_overall,
                    confidence=summary.confidence,
                    profile_totals_json=json.dumps(summary.profile_totals),
                    profile_percentages_json=json.dumps(summary.profile_percentages),
                    created_at=summary.created_at,
                )
                for post, row in zip(posts, rows):
                    analysis.posts.append(AnalyzedPost(
                        username=summary.username,
                        post_id=post.post_id,
                        permalink=post.permalink,
                        title=post.title,
                        content=post.body,
                        created_utc=post.created_utc,
                        scores_json=serialize_score_payload(row),
                        best_category=row.best_category,
                        best_score=row.best_score,
                        has_evidence=row.has_evidence,
                    ))
                session.add(analysis)
                session.flush()
                analysis_id = analysis.id
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to store snapshot for {summary.username}: {e}") from e

        self.logger.info(
            "snapshot_saved",
            analysis_id=analysis_id,
            username=summary.username,
            posts=len(rows),
        )
        return analysis_id

    def latest_snapshot(self, username: str, platform: str = "reddit") -> Optional[StoredAnalysis]:
        """Most recent snapshot of a user, or None."""
        try:
            with get_db_session(self.session_factory) as session:
                row = session.execute(
                    select(ProfileAnalysis)
                    .where(ProfileAnalysis.username == username, ProfileAnalysis.platform == platform)
                    .order_by(ProfileAnalysis.created_at.desc(), ProfileAnalysis.id.desc())
                    .limit(1)
                ).scalar_one_or_none()
                return _to_stored_analysis(row) if row is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read snapshot for {username}: {e}") from e

    def load_posts(self, analysis_id: int) -> List[StoredPost]:
        """Posts of a snapshot in insertion order."""
        try:
            with get_db_session(self.session_factory) as session:
                rows = session.execute(
                    select(AnalyzedPost)
                    .where(AnalyzedPost.analysis_id == analysis_id)
                    .order_by(AnalyzedPost.id)
                ).scalars().all()
                return [
                    StoredPost(
                        post_id=row.post_id,
                        permalink=row.permalink or "",
                        title=row.title,
                        content=row.content,
                        created_utc=row.created_utc or 0,
                        scores_json=row.scores_json,
                        best_category=row.best_category,
                        best_score=row.best_score,
                        has_evidence=bool(row.has_evidence),
                    )
                    for row in rows
                ]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read posts of snapshot {analysis_id}: {e}") from e

    def history(self, username: str) -> List[StoredAnalysis]:
        """All snapshots of a user, newest first."""
        try:
            with get_db_session(self.session_factory) as session:
                rows = session.execute(
                    select(ProfileAnalysis)
                    .where(ProfileAnalysis.username == username)
                    .order_by(ProfileAnalysis.created_at.desc(), ProfileAnalysis.id.desc())
                ).scalars().all()
                return [_to_stored_analysis(row) for row in rows]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read history for {username}: {e}") from e
