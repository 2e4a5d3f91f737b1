"""
SQLAlchemy models for analysis snapshots.

A snapshot is one ProfileAnalysis row plus the AnalyzedPost rows of the
posts it scored. Per-post scores are stored as the JSON payload the
aggregator knows how to parse back.
"""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class ProfileAnalysis(Base):
    """
    Profile-level summary of one analysis run.
    """

    __tablename__ = "profile_analyses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    platform = Column(String, nullable=False)  # reddit | simulation
    username = Column(String, nullable=False)
    post_count = Column(Integer, nullable=False, default=0)
    top_category_overall = Column(String, nullable=False)  # category key or NONE
    confidence = Column(Float, nullable=False, default=0.0)
    profile_totals_json = Column(Text, nullable=False, default="{}")
    profile_percentages_json = Column(Text, nullable=False, default="{}")
    created_at = Column(DateTime(timezone=True), nullable=False)

    posts = relationship(
        "AnalyzedPost",
        back_populates="analysis",
        cascade="all, delete-orphan",
        order_by="AnalyzedPost.id",
    )

    __table_args__ = (Index("idx_analysis_username_created", "username", "created_at"),)

    def __repr__(self):
        return f"<ProfileAnalysis(id={self.id}, username={self.username}, top={self.top_category_overall})>"


class AnalyzedPost(Base):
    """
    One fetched post and its ensemble scores within a snapshot.
    """

    __tablename__ = "analyzed_posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    analysis_id = Column(Integer, ForeignKey("profile_analyses.id", ondelete="CASCADE"), nullable=False)
    username = Column(String, nullable=False)
    post_id = Column(String, nullable=False)  # Platform post id
    permalink = Column(String, nullable=True)
    title = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    created_utc = Column(Integer, nullable=False, default=0)
    scores_json = Column(Text, nullable=True)  # {"scores": {...}, "has_evidence": bool}
    best_category = Column(String, nullable=False)
    best_score = Column(Float, nullable=False, default=0.0)
    has_evidence = Column(Boolean, nullable=False, default=True)

    analysis = relationship("ProfileAnalysis", back_populates="posts")

    __table_args__ = (Index("idx_post_analysis", "analysis_id"),)

    def __repr__(self):
        return f"<AnalyzedPost(post_id={self.post_id}, best={self.best_category})>"
