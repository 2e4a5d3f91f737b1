"""
Version constants for the profile analysis pipeline.

Bump the matching constant whenever a component changes behaviour, so that
stored snapshots remain attributable to the pipeline that produced them.
"""

from .config import settings
from .models.pipeline_version import PipelineVersion
from .preprocessing import STOPLIST_VERSION, TOKENIZER_VERSION

# API Version
API_VERSION = "1.0.0"

# Component versions (update these when implementations change)
ENGINE_VERSION = "seraph-ensemble-1.0.0"
LEXICON_VERSION = "lexicon-en-5cat-1.0"


def get_current_pipeline_version() -> PipelineVersion:
    """
    Get current pipeline version configuration.

    Returns:
        PipelineVersion instance with current versions
    """
    return PipelineVersion(
        engine_version=ENGINE_VERSION,
        lexicon_version=LEXICON_VERSION,
        tokenizer_version=TOKENIZER_VERSION,
        stoplist_version=STOPLIST_VERSION,
        embedding_model=settings.embedding_model_name,
        semantic_enabled=settings.ensemble_weight_semantic > 0.0,
    )
