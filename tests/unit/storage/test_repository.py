"""
Unit tests for the snapshot repository (in-memory SQLite).
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from seraph.exceptions import PersistenceError
from seraph.models.analysis import EnsembleRow, ProfileSummary
from seraph.models.document import RawPost
from seraph.ranking.aggregator import parse_score_payload
from seraph.storage.models import ProfileAnalysis
from seraph.storage.repository import SnapshotRepository


def _summary(username="alice", created_at=None, top="RISK"):
    return ProfileSummary(
        platform="reddit",
        username=username,
        post_count=2,
        evidence_post_count=1,
        profile_totals={"RISK": 0.9, "BASELINE": 0.0},
        profile_percentages={"RISK": 1.0, "BASELINE": 0.0},
        top_category_overall=top,
        confidence=0.88,
        created_at=created_at or datetime.now(timezone.utc),
    )


def _posts():
    return [
        RawPost(post_id="p1", title="t1", body="bad danger", permalink="https://x/p1", created_utc=10),
        RawPost(post_id="p2", title="t2", body=None, permalink="https://x/p2", created_utc=20),
    ]


def _rows():
    return [
        EnsembleRow(
            document_id="p1",
            scores={"RISK": 0.9, "BASELINE": 0.0},
            best_category="RISK",
            best_score=0.9,
            has_evidence=True,
        ),
        EnsembleRow(
            document_id="p2",
            scores={"RISK": 0.0, "BASELINE": 0.0},
            best_category="NONE",
            best_score=0.0,
            has_evidence=False,
        ),
    ]


class TestSnapshotRepository:
    """Test save/read round trips."""

    def test_save_and_latest(self, repository):
        analysis_id = repository.save_snapshot(_summary(), _posts(), _rows())

        snapshot = repository.latest_snapshot("alice")

        assert snapshot.analysis_id == analysis_id
        assert snapshot.top_category_overall == "RISK"
        assert snapshot.profile_totals == {"RISK": 0.9, "BASELINE": 0.0}
        assert snapshot.confidence == pytest.approx(0.88)
        assert snapshot.created_at.tzinfo is not None

    def test_load_posts_keeps_order_and_payloads(self, repository):
        analysis_id = repository.save_snapshot(_summary(), _posts(), _rows())

        posts = repository.load_posts(analysis_id)

        assert [post.post_id for post in posts] == ["p1", "p2"]
        assert posts[1].content is None
        assert posts[1].has_evidence is False

        payload = parse_score_payload(posts[0].scores_json)
        assert payload.ok
        assert payload.scores == {"RISK": 0.9, "BASELINE": 0.0}

    def test_latest_snapshot_is_newest(self, repository):
        old = datetime.now(timezone.utc) - timedelta(days=2)
        repository.save_snapshot(_summary(created_at=old, top="BASELINE"), _posts(), _rows())
        newest_id = repository.save_snapshot(_summary(), _posts(), _rows())

        assert repository.latest_snapshot("alice").analysis_id == newest_id

    def test_latest_snapshot_missing(self, repository):
        assert repository.latest_snapshot("nobody") is None

    def test_history_newest_first(self, repository):
        base = datetime.now(timezone.utc)
        first = repository.save_snapshot(_summary(created_at=base - timedelta(hours=3)), _posts(), _rows())
        second = repository.save_snapshot(_summary(created_at=base), _posts(), _rows())
        repository.save_snapshot(_summary(username="bob"), _posts(), _rows())

        history = repository.history("alice")

        assert [entry.analysis_id for entry in history] == [second, first]

    def test_snapshots_are_per_user(self, repository):
        repository.save_snapshot(_summary(username="bob"), _posts(), _rows())

        assert repository.latest_snapshot("alice") is None
        assert repository.load_posts(999) == []

    def test_mismatched_rows_rejected(self, repository):
        with pytest.raises(PersistenceError, match="mismatch"):
            repository.save_snapshot(_summary(), _posts(), _rows()[:1])

    def test_database_errors_wrapped(self):
        def broken_factory():
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        repository = SnapshotRepository(session_factory=broken_factory)

        with pytest.raises(PersistenceError):
            repository.latest_snapshot("alice")

    def test_history_carries_totals_and_percentages(self, repository):
        repository.save_snapshot(_summary(), _posts(), _rows())

        [snapshot] = repository.history("alice")

        assert snapshot.profile_totals == {"RISK": 0.9, "BASELINE": 0.0}
        assert snapshot.profile_percentages == {"RISK": 1.0, "BASELINE": 0.0}

    def test_unparseable_summary_column_reads_as_empty(self, repository, session_factory):
        analysis_id = repository.save_snapshot(_summary(), _posts(), _rows())

        session = session_factory()
        session.get(ProfileAnalysis, analysis_id).profile_totals_json = "{not json"
        session.commit()
        session.close()

        snapshot = repository.latest_snapshot("alice")

        assert snapshot.profile_totals == {}
        assert snapshot.profile_percentages == {"RISK": 1.0, "BASELINE": 0.0}
        assert snapshot.top_category_overall == "RISK"
