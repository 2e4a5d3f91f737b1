"""
Post and document models.

A RawPost is what the fetch collaborator returns; a Document is the analyzed,
tokenized unit the ranking engine consumes.
"""

from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..preprocessing import tokenize


class RawPost(BaseModel):
    """A social-media post as fetched from the platform."""

    post_id: str = Field(description="Platform post identifier")
    title: Optional[str] = Field(default="", description="Post title")
    body: Optional[str] = Field(default=None, description="Post body text (may be missing)")
    permalink: str = Field(default="", description="Absolute link to the post")
    created_utc: int = Field(default=0, description="Creation time, epoch seconds")

    @property
    def full_text(self) -> str:
        """Title and body joined; a missing body counts as empty."""
        return f"{self.title or ''} {self.body or ''}".strip()


class Document(BaseModel):
    """
    One analyzed text unit: identifier plus normalized tokens.

    Bag-of-words: token order carries no meaning for scoring.
    """

    document_id: str = Field(description="Identifier, usually the post id")
    tokens: Tuple[str, ...] = Field(default=(), description="Normalized token sequence")

    model_config = {"frozen": True}

    @property
    def length(self) -> int:
        return len(self.tokens)

    @classmethod
    def from_text(
        cls,
        document_id: str,
        text: Optional[str],
        tokenizer: Callable[[Optional[str]], List[str]] = tokenize,
    ) -> "Document":
        """Tokenize raw text; None or empty text yields an empty-token document."""
        return cls(document_id=document_id, tokens=tuple(tokenizer(text or "")))

    @classmethod
    def from_post(
        cls,
        post: RawPost,
        tokenizer: Callable[[Optional[str]], List[str]] = tokenize,
    ) -> "Document":
        return cls.from_text(post.post_id, post.full_text, tokenizer=tokenizer)
