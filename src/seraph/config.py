"""
Application configuration management.

This module handles configuration from environment variables using Pydantic Settings.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration from environment variables.

    All settings can be overridden via environment variables with the same name.
    """

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Ensemble weights (VSM / BM25 / optional semantic source)
    ensemble_weight_vsm: float = 0.5
    ensemble_weight_bm25: float = 0.5
    ensemble_weight_semantic: float = 0.0

    # BM25 tuning
    bm25_k1: float = 1.5
    bm25_b: float = 0.75

    # Robust normalization percentiles
    normalization_lower_percentile: float = 10.0
    normalization_upper_percentile: float = 90.0

    # Evidence gating and selection
    min_evidence_tokens: int = 5
    selection_absolute_threshold: float = 0.20
    selection_margin_threshold: float = 0.03

    # Confidence shaping: average best score mapped to confidence 0
    confidence_floor: float = 0.15

    # Embedding score source (optional)
    embedding_model_name: str = "sentence-transformers/all-MiniLM-L6-v2"

    # Reddit client
    reddit_client_id: str = ""
    reddit_client_secret: str = ""
    reddit_user_agent: str = "seraph/1.0"
    reddit_max_posts: int = 50
    reddit_timeout_seconds: float = 10.0

    # Snapshot persistence
    database_url: str = "sqlite:///./seraph.db"
    database_echo_sql: bool = False
    snapshot_max_age_hours: float = 0.0  # 0 = latest snapshot never expires

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


# Global settings instance
settings = Settings()
