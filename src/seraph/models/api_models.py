"""
API request and response models for FastAPI endpoints.

This module defines the Pydantic models used for API request/response validation.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .pipeline_version import PipelineVersion


class AnalyzeRequest(BaseModel):
    """Request model for Reddit profile analysis."""

    profile_url: str = Field(
        min_length=1,
        description="Profile URL (https://www.reddit.com/user/<name>) or bare username",
        examples=["https://www.reddit.com/user/spez/"],
    )
    force_refresh: bool = Field(
        default=False, description="Ignore any stored snapshot and fetch again"
    )


class SimulateRequest(BaseModel):
    """Request model for analyzing caller-supplied texts."""

    username: str = Field(default="test_subject", description="Subject label for the run")
    posts: List[str] = Field(default_factory=list, description="Post texts, one per document")


class HistoryEntry(BaseModel):
    """Summary of one stored analysis snapshot."""

    analysis_id: int
    platform: str
    username: str
    post_count: int
    profile_totals: Dict[str, float]
    profile_percentages: Dict[str, float]
    top_category_overall: str
    confidence: float
    created_at: datetime


class HistoryResponse(BaseModel):
    """Stored snapshots of a subject, newest first."""

    username: str
    analyses: List[HistoryEntry] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status", examples=["healthy"])
    version: str = Field(description="API version", examples=["1.0.0"])
    engine_version: str = Field(description="Ranking engine version")
    uptime_seconds: float = Field(description="Service uptime")


class VersionResponse(BaseModel):
    """Version information response."""

    api_version: str = Field(description="API version")
    pipeline_version: PipelineVersion = Field(
        description="Current pipeline version"
    )


class ErrorResponse(BaseModel):
    """Error payload returned by the analysis endpoints."""

    success: bool = False
    error: str
    detail: Optional[str] = None
