"""
FastAPI application for the profile analysis service.

This is the main application that wires the routers and middleware.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from ..version import API_VERSION
from ..config import settings
from ..logging_config import setup_logging
from .routes import analyze, health, version
from .middleware import setup_error_handling_middleware, setup_logging_middleware

# Setup logging on module import
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info(
        "api_starting",
        version=API_VERSION,
        log_level=settings.log_level,
        database_url=settings.database_url.split("@")[-1],
        semantic_enabled=settings.ensemble_weight_semantic > 0.0,
    )
    yield
    logger.info("api_shutting_down")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Seraph Profile Analysis",
        description="Lexical ensemble (TF-IDF + BM25) ranking of social-media posts into distress categories",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Custom middleware (order matters - last added = outermost)
    setup_error_handling_middleware(app)
    setup_logging_middleware(app)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(version.router, prefix="/api/v1", tags=["Version"])
    app.include_router(analyze.router)

    return app


# Create app instance
app = create_app()


def main() -> None:
    """
    Entry point for running the API server directly.

    For development use. In production, use uvicorn directly.
    """
    import uvicorn

    uvicorn.run(
        "seraph.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
