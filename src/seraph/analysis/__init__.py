"""
Profile analysis orchestration (fetch, rank, persist).
"""

from .service import ProfileAnalysisService, build_post_results

__all__ = ["ProfileAnalysisService", "build_post_results"]
