# Data models for the profile analysis pipeline

from .pipeline_version import PipelineVersion
from .document import Document, RawPost
from .analysis import AnalysisResult, EnsembleRow, PostResult, ProfileSummary
from .api_models import (
    AnalyzeRequest,
    HealthResponse,
    HistoryEntry,
    HistoryResponse,
    SimulateRequest,
    VersionResponse,
)

__all__ = [
    "PipelineVersion",
    "Document",
    "RawPost",
    "EnsembleRow",
    "ProfileSummary",
    "PostResult",
    "AnalysisResult",
    "AnalyzeRequest",
    "SimulateRequest",
    "HistoryEntry",
    "HistoryResponse",
    "HealthResponse",
    "VersionResponse",
]
