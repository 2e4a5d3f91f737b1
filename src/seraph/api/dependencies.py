"""
FastAPI dependency providers.

The service is built lazily on first request and shared afterwards. Tests
replace it through app.dependency_overrides.
"""

from typing import Optional

import structlog

from ..analysis.service import ProfileAnalysisService
from ..ranking.semantic import EmbeddingRanker
from ..config import settings
from ..storage.database import create_all_tables

logger = structlog.get_logger(__name__)

_service: Optional[ProfileAnalysisService] = None


def get_analysis_service() -> ProfileAnalysisService:
    """
    Get or create the shared analysis service (singleton).

    Creates the snapshot tables on first use. The embedding source is only
    attached when its ensemble weight is positive.
    """
    global _service

    if _service is None:
        create_all_tables()
        score_source = EmbeddingRanker() if settings.ensemble_weight_semantic > 0.0 else None
        _service = ProfileAnalysisService(score_source=score_source)
        logger.info("analysis_service_created", semantic_enabled=score_source is not None)

    return _service
