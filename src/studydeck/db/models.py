"""Domain models for the studydeck database layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ProgressStatus(str, Enum):
    """Mastery state of a flashcard, written only by the scheduler."""

    NEW = "new"
    LEARNING = "learning"
    NEEDS_REVIEW = "needs_review"
    MASTERED = "mastered"


class DocumentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


@dataclass
class Document:
    id: str
    name: str
    file_path: str = ""
    file_type: str = "text"  # text | pdf
    status: DocumentStatus = DocumentStatus.PENDING
    total_chunks: int = 0
    error_message: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class TextChunk:
    """Chunker output: a normalised slice of a document, not yet stored."""

    content: str
    index: int
    page_number: int | None = None


@dataclass
class DocumentChunk:
    document_id: str
    chunk_index: int
    content: str
    page_number: int | None = None
    embedding: list[float] = field(default_factory=list)
    id: int | None = None  # set after insert; doubles as the vec table rowid
    created_at: str | None = None


@dataclass
class SearchResult:
    """A ranked chunk match for a query. Never persisted."""

    id: int
    document_id: str
    document_name: str
    content: str
    page_number: int | None
    similarity: float


@dataclass
class ReviewRecord:
    """Per-flashcard study state (the ``progress`` table)."""

    flashcard_id: str
    status: ProgressStatus = ProgressStatus.NEW
    times_reviewed: int = 0
    times_correct: int = 0
    last_reviewed_at: datetime | None = None
    next_review_at: datetime | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def __post_init__(self) -> None:
        if self.times_correct > self.times_reviewed:
            raise ValueError(
                f"times_correct ({self.times_correct}) cannot exceed "
                f"times_reviewed ({self.times_reviewed})"
            )

    @property
    def success_rate(self) -> float:
        if self.times_reviewed == 0:
            return 0.0
        return self.times_correct / self.times_reviewed


@dataclass
class StudyEvent:
    flashcard_id: str
    was_correct: bool
    reviewed_at: datetime
    response_time_ms: int | None = None


@dataclass
class DailyStats:
    date: str  # ISO day, YYYY-MM-DD
    cards_studied: int = 0
    cards_correct: int = 0
