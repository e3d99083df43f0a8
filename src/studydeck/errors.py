"""Error taxonomy shared by the ingestion, retrieval and study layers.

- ``ConfigurationError``: a required credential or store is missing. Fails fast,
  never retried.
- ``UpstreamError``: the embedding service was reached but reported a failure.
- ``ValidationError``: the caller supplied malformed configuration (chunk sizes,
  vector dimensions, config file contents).
"""

from __future__ import annotations


class StudydeckError(Exception):
    """Base class for all studydeck errors."""


class ConfigurationError(StudydeckError):
    """Raised when a required credential or backing store is not available."""


class UpstreamError(StudydeckError):
    """Raised when an external service responds with a failure.

    Attributes:
        message: The upstream error message, or a generic description when the
            service did not provide one.
    """

    def __init__(self, message: str | None = None) -> None:
        self.message = message or "Unknown error"
        super().__init__(f"Embedding service error: {self.message}")


class ValidationError(StudydeckError, ValueError):
    """Raised when configuration values are malformed or out of range."""
