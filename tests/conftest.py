"""
Global pytest fixtures and configuration for test suite.

This module provides reusable fixtures for:
- Small hand-checkable lexicons and documents
- In-memory snapshot storage
- Sample Reddit posts
"""

from typing import List

import pytest
from sqlalchemy.orm import sessionmaker

from seraph.models.document import Document, RawPost
from seraph.ranking.categories import CategoryLexicon
from seraph.storage.database import build_engine, create_all_tables, drop_all_tables
from seraph.storage.repository import SnapshotRepository


@pytest.fixture
def risk_baseline_lexicon() -> CategoryLexicon:
    """
    Two-category lexicon with already-normalized tokens.

    Returns:
        CategoryLexicon RISK → [bad, danger], BASELINE → [happy, good]
    """
    return CategoryLexicon(
        {
            "RISK": ["bad", "danger"],
            "BASELINE": ["happy", "good"],
        },
    )


@pytest.fixture
def scenario_documents() -> List[Document]:
    """
    Three-document batch: strong RISK signal, baseline content, empty post.
    """
    return [
        Document(document_id="doc1", tokens=("bad", "danger", "bad")),
        Document(document_id="doc2", tokens=("happy", "good", "day")),
        Document(document_id="doc3", tokens=()),
    ]


@pytest.fixture
def session_factory():
    """
    Session factory bound to a fresh in-memory SQLite database.

    Yields:
        sessionmaker usable by SnapshotRepository
    """
    engine = build_engine("sqlite://")
    create_all_tables(engine)

    yield sessionmaker(bind=engine, expire_on_commit=False)

    drop_all_tables(engine)
    engine.dispose()


@pytest.fixture
def repository(session_factory) -> SnapshotRepository:
    return SnapshotRepository(session_factory=session_factory)


@pytest.fixture
def sample_posts() -> List[RawPost]:
    """Reddit-like posts covering risk, baseline and empty content."""
    return [
        RawPost(
            post_id="p1",
            title="I can't do this anymore",
            body="I feel so hopeless and empty, crying every night, the pain never stops and I am lonely",
            permalink="https://www.reddit.com/r/test/comments/p1/",
            created_utc=1700000000,
        ),
        RawPost(
            post_id="p2",
            title="New gym routine",
            body="Went to the gym after work, then cooked dinner and played a game with a friend",
            permalink="https://www.reddit.com/r/test/comments/p2/",
            created_utc=1700000100,
        ),
        RawPost(
            post_id="p3",
            title="",
            body=None,
            permalink="https://www.reddit.com/r/test/comments/p3/",
            created_utc=1700000200,
        ),
    ]
