"""
Unit tests for the profile analysis service.

The Reddit client is mocked; snapshots go to in-memory SQLite.
"""

from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import Mock

from seraph.analysis.service import ProfileAnalysisService
from seraph.exceptions import EmptyProfileError, FetchError, InvalidProfileUrlError, PersistenceError
from seraph.models.analysis import ProfileSummary
from seraph.ranking.categories import NONE_CATEGORY


@pytest.fixture
def client(sample_posts):
    client = Mock()
    client.fetch_posts.return_value = sample_posts
    return client


@pytest.fixture
def service(client, repository):
    return ProfileAnalysisService(client=client, repository=repository)


class TestAnalyzeProfile:
    """Test analyze_profile()."""

    def test_fresh_analysis_is_persisted(self, service, client, repository):
        result = service.analyze_profile("https://www.reddit.com/user/alice/")

        client.fetch_posts.assert_called_once_with("alice", max_posts=50)
        assert result.cached is False
        assert result.summary.username == "alice"
        assert result.summary.platform == "reddit"
        assert result.summary.analysis_id is not None
        assert [post.post_id for post in result.posts] == ["p1", "p2", "p3"]
        assert result.posts[0].best_category == "SADNESS"

        stored = repository.latest_snapshot("alice")
        assert stored.analysis_id == result.summary.analysis_id

    def test_snapshot_hit_skips_fetch(self, service, client):
        first = service.analyze_profile("alice")
        client.fetch_posts.reset_mock()

        second = service.analyze_profile("https://www.reddit.com/user/alice")

        client.fetch_posts.assert_not_called()
        assert second.cached is True
        assert second.summary.analysis_id == first.summary.analysis_id
        assert second.summary.top_category_overall == first.summary.top_category_overall
        assert second.summary.profile_totals == pytest.approx(first.summary.profile_totals)
        assert second.summary.confidence == pytest.approx(first.summary.confidence)
        assert second.summary.post_count == 3
        assert [post.post_id for post in second.posts] == ["p1", "p2", "p3"]

    def test_force_refresh_fetches_again(self, service, client):
        service.analyze_profile("alice")
        result = service.analyze_profile("alice", force_refresh=True)

        assert client.fetch_posts.call_count == 2
        assert result.cached is False

    def test_expired_snapshot_is_a_miss(self, client, repository, sample_posts):
        service = ProfileAnalysisService(client=client, repository=repository, snapshot_max_age_hours=1)
        old = ProfileSummary(
            platform="reddit",
            username="alice",
            post_count=0,
            top_category_overall=NONE_CATEGORY,
            confidence=0.0,
            created_at=datetime.now(timezone.utc) - timedelta(hours=5),
        )
        repository.save_snapshot(old, [], [])

        result = service.analyze_profile("alice")

        client.fetch_posts.assert_called_once()
        assert result.cached is False

    def test_empty_profile(self, service, client):
        client.fetch_posts.return_value = []

        with pytest.raises(EmptyProfileError) as exc_info:
            service.analyze_profile("ghost")

        assert exc_info.value.username == "ghost"
        assert "EMPTY_PROFILE" in str(exc_info.value)

    def test_fetch_error_propagates(self, service, client):
        client.fetch_posts.side_effect = FetchError("Reddit returned HTTP 503")

        with pytest.raises(FetchError):
            service.analyze_profile("alice")

    def test_blank_url_rejected(self, service):
        with pytest.raises(InvalidProfileUrlError) as exc_info:
            service.analyze_profile("https://www.reddit.com/user/")

        assert exc_info.value.profile_url == "https://www.reddit.com/user/"

    def test_persistence_failure_still_returns_result(self, client, sample_posts):
        repository = Mock()
        repository.latest_snapshot.return_value = None
        repository.save_snapshot.side_effect = PersistenceError("disk full")
        service = ProfileAnalysisService(client=client, repository=repository)

        result = service.analyze_profile("alice")

        assert result.summary.analysis_id is None
        assert len(result.posts) == 3

    def test_lookup_failure_falls_back_to_fetch(self, client):
        repository = Mock()
        repository.latest_snapshot.side_effect = PersistenceError("locked")
        repository.save_snapshot.return_value = 7
        service = ProfileAnalysisService(client=client, repository=repository)

        result = service.analyze_profile("alice")

        client.fetch_posts.assert_called_once()
        assert result.summary.analysis_id == 7


class TestSimulate:
    """Test simulate()."""

    def test_simulation_is_not_persisted(self, client):
        repository = Mock()
        service = ProfileAnalysisService(client=client, repository=repository)

        result = service.simulate("tester", [
            "I am so sad and lonely, crying all night long with tears",
            "Great day at work, then the gym and a movie with a friend",
        ])

        repository.save_snapshot.assert_not_called()
        client.fetch_posts.assert_not_called()
        assert result.summary.platform == "simulation"
        assert result.summary.analysis_id is None
        assert [post.post_id for post in result.posts] == ["sim_0", "sim_1"]
        assert result.posts[0].title == "Simulation Post 1"
        assert result.posts[0].best_category == "SADNESS"
        assert result.posts[1].best_category == "FUNCTIONAL_BASELINE"

    def test_generated_titles_are_not_scored(self, client):
        service = ProfileAnalysisService(client=client, repository=Mock())

        result = service.simulate("tester", ["post"])

        # One token: gated regardless of the "Simulation Post 1" label
        assert result.posts[0].has_evidence is False

    def test_empty_simulation_rejected(self, client):
        service = ProfileAnalysisService(client=client, repository=Mock())

        with pytest.raises(ValueError):
            service.simulate("tester", [])


class TestHistory:
    """Test history()."""

    def test_history_newest_first(self, service):
        first = service.analyze_profile("alice")
        second = service.analyze_profile("alice", force_refresh=True)

        history = service.history("alice")

        assert [entry.analysis_id for entry in history] == [
            second.summary.analysis_id,
            first.summary.analysis_id,
        ]
