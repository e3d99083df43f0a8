"""Spaced-repetition scheduling, review prioritisation and exam readiness.

A simplified SM-2 style schedule. Any miss sends the card back to
``needs_review`` for another look in 10 minutes. A correct answer spaces the
next review by the card's running success rate:

    rate >= 0.90 and reviewed >= 5   mastered   +30 days
    rate >= 0.70 and reviewed >= 3   learning   +7 days
    rate >= 0.50                     learning   +3 days
    otherwise                        learning   +1 day

The first matching row wins; thresholds are inclusive. A first-ever correct
answer is ``learning`` +1 day.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from studydeck.db.models import ProgressStatus, ReviewRecord

T = TypeVar("T")

RETRY_DELAY = timedelta(minutes=10)

# (min success rate, min times reviewed, status, interval)
_CORRECT_TIERS: tuple[tuple[float, int, ProgressStatus, timedelta], ...] = (
    (0.90, 5, ProgressStatus.MASTERED, timedelta(days=30)),
    (0.70, 3, ProgressStatus.LEARNING, timedelta(days=7)),
    (0.50, 0, ProgressStatus.LEARNING, timedelta(days=3)),
)
_FALLBACK_INTERVAL = timedelta(days=1)

_STATUS_PRIORITY: dict[ProgressStatus | None, int] = {
    ProgressStatus.NEEDS_REVIEW: 0,
    ProgressStatus.NEW: 1,
    None: 1,
    ProgressStatus.LEARNING: 2,
    ProgressStatus.MASTERED: 3,
}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class ScheduleResult:
    status: ProgressStatus
    next_review_at: datetime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def schedule(
    prior: ReviewRecord | None,
    was_correct: bool,
    now: datetime | None = None,
) -> ScheduleResult:
    """Compute the new status and due date after one review.

    Args:
        prior: The card's record before this review, or None on first exposure.
        was_correct: Whether the latest attempt was correct.
        now: Review time; defaults to the current UTC time.
    """
    now = now or utcnow()

    if not was_correct:
        return ScheduleResult(ProgressStatus.NEEDS_REVIEW, now + RETRY_DELAY)

    if prior is None:
        return ScheduleResult(ProgressStatus.LEARNING, now + _FALLBACK_INTERVAL)

    times_correct = prior.times_correct + 1
    times_reviewed = prior.times_reviewed + 1
    success_rate = times_correct / times_reviewed

    for min_rate, min_reviewed, status, interval in _CORRECT_TIERS:
        if success_rate >= min_rate and times_reviewed >= min_reviewed:
            return ScheduleResult(status, now + interval)
    return ScheduleResult(ProgressStatus.LEARNING, now + _FALLBACK_INTERVAL)


def apply_review(
    prior: ReviewRecord | None,
    flashcard_id: str,
    was_correct: bool,
    now: datetime | None = None,
) -> ReviewRecord:
    """Return the record that results from one review of *flashcard_id*.

    Counters are incremented and status / due date come from ``schedule``,
    so the stored status always agrees with the record's own counters.
    """
    now = now or utcnow()
    result = schedule(prior, was_correct, now)
    reviewed = prior.times_reviewed if prior else 0
    correct = prior.times_correct if prior else 0
    return ReviewRecord(
        flashcard_id=flashcard_id,
        status=result.status,
        times_reviewed=reviewed + 1,
        times_correct=correct + (1 if was_correct else 0),
        last_reviewed_at=now,
        next_review_at=result.next_review_at,
        created_at=prior.created_at if prior else None,
    )


def _default_progress(card: Any) -> ReviewRecord | None:
    if isinstance(card, ReviewRecord):
        return card
    return getattr(card, "progress", None)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def priority_key(progress: ReviewRecord | None) -> tuple[int, datetime]:
    """Sort key: status tier, then due date (undated counts as most overdue)."""
    status = ProgressStatus(progress.status) if progress is not None else None
    due = progress.next_review_at if progress is not None else None
    return _STATUS_PRIORITY[status], _as_utc(due) if due is not None else _EPOCH


def sort_by_priority(
    cards: Iterable[T],
    progress: Callable[[T], ReviewRecord | None] = _default_progress,
) -> list[T]:
    """Return *cards* in study order without modifying the input.

    Order: ``needs_review`` < ``new`` / no progress < ``learning`` <
    ``mastered``, then ascending ``next_review_at``. Full ties keep their
    input order.

    Args:
        cards: Cards, records, or anything *progress* can map to a ReviewRecord.
        progress: Extracts the card's ReviewRecord (or None). Defaults to the
            card itself when it is a ReviewRecord, else its ``progress`` attribute.
    """
    return sorted(cards, key=lambda card: priority_key(progress(card)))


def readiness(total: int, mastered: int, learning: int) -> int:
    """Exam readiness in percent: mastered cards count fully, learning cards half.

    Rounds half up and never exceeds 100.
    """
    if total == 0:
        return 0
    weighted = mastered + learning * 0.5
    percent = math.floor(weighted / total * 100 + 0.5)
    return min(percent, 100)
