"""Base chunker interface and token-size helpers."""

from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod

from studydeck.db.models import TextChunk
from studydeck.errors import ValidationError

CHARS_PER_TOKEN = 4

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace to a single space and trim both ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def estimate_tokens(text: str) -> int:
    """Approximate token count: 4 characters ≈ 1 token, rounded up."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class BaseChunker(ABC):
    """Abstract base for chunkers.

    Sizes are given in approximate tokens and converted to characters with
    ``CHARS_PER_TOKEN``; no tokenizer dependency is required.
    """

    def __init__(self, chunk_size: int = 500, chunk_overlap: int = 50) -> None:
        if chunk_size < 1:
            raise ValidationError(f"chunk_size must be >= 1, got {chunk_size}")
        if chunk_overlap < 0:
            raise ValidationError(f"chunk_overlap must be >= 0, got {chunk_overlap}")
        if chunk_overlap >= chunk_size:
            raise ValidationError(
                f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    @property
    def chunk_chars(self) -> int:
        return self.chunk_size * CHARS_PER_TOKEN

    @property
    def overlap_chars(self) -> int:
        return self.chunk_overlap * CHARS_PER_TOKEN

    @property
    def step(self) -> int:
        return self.chunk_chars - self.overlap_chars

    @abstractmethod
    def chunk(self, text: str) -> list[TextChunk]:
        """Split *text* into TextChunks with sequential indices starting at 0."""

    @staticmethod
    def _make_chunks(
        texts: list[str], page_number: int | None = None, start: int = 0
    ) -> list[TextChunk]:
        """Convert text segments into sequentially indexed TextChunks."""
        return [
            TextChunk(content=t, index=start + i, page_number=page_number)
            for i, t in enumerate(texts)
        ]
