"""
Profile analysis API routes.

Provides REST endpoints for:
- POST /api/analyze/reddit - Analyze a Reddit profile (snapshot cached)
- GET /api/analyze/history/{username} - Stored snapshots of a user
- POST /api/test/simulate - Analyze caller-supplied texts (not stored)
"""

from fastapi import APIRouter, Depends, HTTPException, status
import structlog

from ...analysis.service import ProfileAnalysisService
from ...exceptions import EmptyProfileError, FetchError, InvalidProfileUrlError, PersistenceError
from ...models.analysis import AnalysisResult
from ...models.api_models import AnalyzeRequest, HistoryEntry, HistoryResponse, SimulateRequest
from ..dependencies import get_analysis_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api")


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("/analyze/reddit", response_model=AnalysisResult, tags=["Analysis"])
def analyze_reddit_endpoint(
    request: AnalyzeRequest,
    service: ProfileAnalysisService = Depends(get_analysis_service),
) -> AnalysisResult:
    """
    Analyze the submitted posts of a Reddit profile.

    Raises:
        HTTPException: 400 on an unusable URL, 404 on an empty profile,
            502 when Reddit cannot be reached
    """
    logger.info(
        "analysis_request_received",
        profile_url=request.profile_url,
        force_refresh=request.force_refresh,
    )

    try:
        return service.analyze_profile(request.profile_url, force_refresh=request.force_refresh)

    except EmptyProfileError as e:
        logger.info("analysis_empty_profile", username=e.username)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    except FetchError as e:
        logger.error("analysis_fetch_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Reddit fetch failed: {e}",
        )

    except InvalidProfileUrlError as e:
        logger.info("analysis_invalid_profile_url", profile_url=e.profile_url)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/analyze/history/{username}", response_model=HistoryResponse, tags=["Analysis"])
def history_endpoint(
    username: str,
    service: ProfileAnalysisService = Depends(get_analysis_service),
) -> HistoryResponse:
    """
    List stored snapshot summaries of a user, newest first.
    """
    try:
        snapshots = service.history(username)
    except PersistenceError as e:
        logger.error("history_read_failed", username=username, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Snapshot store unavailable",
        )

    return HistoryResponse(
        username=username,
        analyses=[
            HistoryEntry(
                analysis_id=snapshot.analysis_id,
                platform=snapshot.platform,
                username=snapshot.username,
                post_count=snapshot.post_count,
                profile_totals=snapshot.profile_totals,
                profile_percentages=snapshot.profile_percentages,
                top_category_overall=snapshot.top_category_overall,
                confidence=snapshot.confidence,
                created_at=snapshot.created_at,
            )
            for snapshot in snapshots
        ],
    )


@router.post("/test/simulate", response_model=AnalysisResult, tags=["Simulation"])
def simulate_endpoint(
    request: SimulateRequest,
    service: ProfileAnalysisService = Depends(get_analysis_service),
) -> AnalysisResult:
    """
    Analyze the given texts as one simulated profile. Nothing is stored.

    Raises:
        HTTPException: 400 when no posts are provided
    """
    if not request.posts:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No posts provided")

    logger.info("simulation_request_received", username=request.username, posts=len(request.posts))
    return service.simulate(request.username, request.posts)
