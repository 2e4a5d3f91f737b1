"""
Pipeline version model for reproducible analyses.

Same version parameters + same input posts = same scores. Every stored
snapshot can be traced back to the components that produced it.
"""

from pydantic import BaseModel, Field


class PipelineVersion(BaseModel):
    """
    Immutable version contract of the analysis pipeline.
    """

    engine_version: str = Field(
        description="Ranking engine version", examples=["seraph-ensemble-1.0.0"]
    )
    lexicon_version: str = Field(
        description="Category lexicon version", examples=["lexicon-en-5cat-1.0"]
    )
    tokenizer_version: str = Field(
        description="Tokenizer version", examples=["tokenizer-en-snowball-1.0.0"]
    )
    stoplist_version: str = Field(
        description="English stopwords list version", examples=["stopwords-en-lucene-1.0"]
    )
    embedding_model: str = Field(
        description="Embedding model for the optional semantic source",
        examples=["sentence-transformers/all-MiniLM-L6-v2"],
    )
    semantic_enabled: bool = Field(
        default=False, description="Whether the semantic source contributes to the ensemble"
    )

    model_config = {"frozen": True}

    def to_repr(self) -> str:
        """
        Short representation for logging.

        Returns:
            Compact string representation with key version components.
        """
        return f"Pipeline-{self.engine_version}-{self.lexicon_version}-{self.tokenizer_version}"
