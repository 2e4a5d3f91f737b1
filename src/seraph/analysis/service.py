"""
Profile analysis service.

Orchestrates one analysis request:
1. Snapshot cache lookup (latest stored analysis of the user)
2. Fetch posts from Reddit
3. Rank them with the ensemble engine
4. Best-effort snapshot persistence

Simulation runs analyze caller-supplied texts and are never persisted.
"""

import time
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import structlog

from ..clients.reddit import RedditClient, extract_username
from ..config import settings
from ..exceptions import (
    EmptyProfileError,
    InvalidProfileUrlError,
    PersistenceError,
    UnknownCategoryError,
)
from ..models.analysis import AnalysisResult, EnsembleRow, PostResult, ProfileSummary
from ..models.document import Document, RawPost
from ..ranking.aggregator import ProfileAggregator, rows_from_payloads
from ..ranking.categories import CategoryLexicon, build_default_lexicon
from ..ranking.engine import EngineConfig, analyze, analyze_posts
from ..ranking.semantic import ScoreSource
from ..storage.repository import SnapshotRepository, StoredAnalysis

logger = structlog.get_logger(__name__)

SIMULATION_PLATFORM = "simulation"
SIMULATION_PERMALINK = "https://localhost/simulation"
SECONDS_PER_DAY = 86400


def build_post_results(posts: Sequence[RawPost], rows: Sequence[EnsembleRow]) -> List[PostResult]:
    """Join posts with their ensemble rows (index-aligned)."""
    return [
        PostResult(
            post_id=post.post_id,
            title=post.title,
            content=post.body,
            permalink=post.permalink,
            created_utc=post.created_utc,
            scores=row.scores,
            best_category=row.best_category,
            best_score=row.best_score,
            has_evidence=row.has_evidence,
        )
        for post, row in zip(posts, rows)
    ]


class ProfileAnalysisService:
    """
    Entry point used by the API and CLI.

    All collaborators are injectable; defaults come from settings.
    """

    def __init__(
        self,
        client: Optional[RedditClient] = None,
        repository: Optional[SnapshotRepository] = None,
        lexicon: Optional[CategoryLexicon] = None,
        config: Optional[EngineConfig] = None,
        score_source: Optional[ScoreSource] = None,
        snapshot_max_age_hours: Optional[float] = None,
        max_posts: Optional[int] = None,
    ):
        self.client = client
        self.repository = repository or SnapshotRepository()
        self.lexicon = lexicon or build_default_lexicon()
        self.config = config or EngineConfig.from_config()
        self.score_source = score_source
        self.snapshot_max_age_hours = (
            settings.snapshot_max_age_hours if snapshot_max_age_hours is None else snapshot_max_age_hours
        )
        self.max_posts = max_posts or settings.reddit_max_posts

        self.logger = logger.bind(component="profile_analysis_service")

    def _get_client(self) -> RedditClient:
        if self.client is None:
            self.client = RedditClient()
        return self.client

    # ========================================================================
    # REDDIT PROFILES
    # ========================================================================

    def analyze_profile(self, profile_url: str, force_refresh: bool = False) -> AnalysisResult:
        """
        Analyze a Reddit profile, serving a stored snapshot when one is fresh.

        Args:
            profile_url: Profile URL or bare username
            force_refresh: Skip the snapshot lookup

        Returns:
            AnalysisResult (cached=True when served from a snapshot)

        Raises:
            InvalidProfileUrlError: If no username can be extracted
            EmptyProfileError: If the user has no posts
            FetchError: If Reddit cannot be reached
        """
        username = extract_username(profile_url)
        if not username:
            raise InvalidProfileUrlError(profile_url)

        if not force_refresh:
            cached = self._load_snapshot(username)
            if cached is not None:
                return cached

        start_time = time.time()
        posts = self._get_client().fetch_posts(username, max_posts=self.max_posts)
        if not posts:
            raise EmptyProfileError(username)

        outcome = analyze_posts(
            username,
            posts,
            self.lexicon,
            config=self.config,
            platform="reddit",
            score_source=self.score_source,
        )
        summary = self._persist(outcome.summary, posts, outcome.rows)

        self.logger.info(
            "profile_analyzed",
            username=username,
            posts=len(posts),
            top_category=summary.top_category_overall,
            persisted=summary.analysis_id is not None,
            processing_time_ms=round((time.time() - start_time) * 1000, 2),
        )

        return AnalysisResult(summary=summary, posts=build_post_results(posts, outcome.rows))

    def _persist(
        self,
        summary: ProfileSummary,
        posts: Sequence[RawPost],
        rows: Sequence[EnsembleRow],
    ) -> ProfileSummary:
        try:
            analysis_id = self.repository.save_snapshot(summary, posts, rows)
        except PersistenceError as e:
            self.logger.warning("snapshot_persist_failed", username=summary.username, error=str(e))
            return summary
        return summary.model_copy(update={"analysis_id": analysis_id})

    def _is_fresh(self, snapshot: StoredAnalysis) -> bool:
        if self.snapshot_max_age_hours <= 0:
            return True
        age = datetime.now(timezone.utc) - snapshot.created_at
        return age <= timedelta(hours=self.snapshot_max_age_hours)

    def _load_snapshot(self, username: str) -> Optional[AnalysisResult]:
        """
        Rebuild the latest fresh snapshot of a user, or None on a miss.

        Stored posts whose score payload does not parse are left out. A
        snapshot scored with categories the current lexicon lacks is a miss.
        """
        try:
            snapshot = self.repository.latest_snapshot(username)
            if snapshot is None or not self._is_fresh(snapshot):
                return None
            stored_posts = self.repository.load_posts(snapshot.analysis_id)
        except PersistenceError as e:
            self.logger.warning("snapshot_lookup_failed", username=username, error=str(e))
            return None

        try:
            rows, skipped = rows_from_payloads(
                [(post.post_id, post.scores_json) for post in stored_posts],
                self.lexicon,
                self.config.thresholds,
            )
        except UnknownCategoryError as e:
            self.logger.warning("snapshot_lexicon_mismatch", username=username, error=str(e))
            return None

        aggregator = ProfileAggregator(confidence_floor=self.config.confidence_floor)
        summary = aggregator.aggregate(
            rows,
            self.lexicon,
            username=username,
            platform=snapshot.platform,
            post_count=snapshot.post_count,
        ).model_copy(update={
            "analysis_id": snapshot.analysis_id,
            "post_count": snapshot.post_count,
            "created_at": snapshot.created_at,
        })

        posts_by_id = {post.post_id: post for post in stored_posts}
        posts = [
            RawPost(
                post_id=row.document_id,
                title=posts_by_id[row.document_id].title,
                body=posts_by_id[row.document_id].content,
                permalink=posts_by_id[row.document_id].permalink,
                created_utc=posts_by_id[row.document_id].created_utc,
            )
            for row in rows
        ]

        self.logger.info(
            "snapshot_hit",
            username=username,
            analysis_id=snapshot.analysis_id,
            created_at=snapshot.created_at.isoformat(),
            skipped_posts=len(skipped),
        )

        return AnalysisResult(summary=summary, posts=build_post_results(posts, rows), cached=True)

    # ========================================================================
    # SIMULATION
    # ========================================================================

    def simulate(self, username: str, texts: Sequence[str]) -> AnalysisResult:
        """
        Analyze caller-supplied texts as one profile. Nothing is stored.

        Only the given text is scored; the generated titles are labels.

        Raises:
            ValueError: If no texts are given
        """
        if not texts:
            raise ValueError("No posts provided")

        now = int(time.time())
        posts = [
            RawPost(
                post_id=f"sim_{index}",
                title=f"Simulation Post {index + 1}",
                body=text,
                permalink=SIMULATION_PERMALINK,
                created_utc=now - index * SECONDS_PER_DAY,
            )
            for index, text in enumerate(texts)
        ]
        documents = [Document.from_text(post.post_id, post.body) for post in posts]

        semantic_scores = None
        if self.score_source is not None:
            semantic_scores = self.score_source.score([text or "" for text in texts])

        outcome = analyze(
            username,
            documents,
            self.lexicon,
            config=self.config,
            platform=SIMULATION_PLATFORM,
            semantic_scores=semantic_scores,
        )

        return AnalysisResult(summary=outcome.summary, posts=build_post_results(posts, outcome.rows))

    # ========================================================================
    # HISTORY
    # ========================================================================

    def history(self, username: str) -> List[StoredAnalysis]:
        """Stored snapshots of a user, newest first."""
        return self.repository.history(extract_username(username))
