"""
Snapshot storage (SQLAlchemy).
"""

from .database import build_engine, create_all_tables, get_db_session, get_engine
from .models import AnalyzedPost, Base, ProfileAnalysis
from .repository import SnapshotRepository, StoredAnalysis, StoredPost

__all__ = [
    "build_engine",
    "create_all_tables",
    "get_db_session",
    "get_engine",
    "Base",
    "ProfileAnalysis",
    "AnalyzedPost",
    "SnapshotRepository",
    "StoredAnalysis",
    "StoredPost",
]
