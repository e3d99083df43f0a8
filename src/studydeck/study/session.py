"""Study session service: record reviews and report on progress."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from studydeck.db.models import ProgressStatus, ReviewRecord, StudyEvent
from studydeck.db.progress import ProgressRepository
from studydeck.study.scheduler import apply_review, readiness, utcnow

logger = logging.getLogger(__name__)

_STREAK_LOOKBACK_DAYS = 30


@dataclass
class ProgressSummary:
    total: int
    mastered: int
    learning: int
    needs_review: int
    new: int

    @property
    def readiness(self) -> int:
        return readiness(self.total, self.mastered, self.learning)


@dataclass
class CalendarDay:
    date: str
    cards_studied: int
    level: int  # 0 = no activity … 4 = busiest


def record_review(
    repo: ProgressRepository,
    flashcard_id: str,
    was_correct: bool,
    *,
    response_time_ms: int | None = None,
    now: datetime | None = None,
) -> ReviewRecord:
    """Apply one review to *flashcard_id* and persist the outcome.

    Reads the current record, schedules the next review, upserts the record,
    appends a study-history event and bumps the daily stats of the review's
    UTC day.
    """
    now = now or utcnow()
    prior = repo.get_progress(flashcard_id)
    record = apply_review(prior, flashcard_id, was_correct, now)

    repo.upsert_progress(record)
    repo.add_study_event(
        StudyEvent(
            flashcard_id=flashcard_id,
            was_correct=was_correct,
            reviewed_at=now,
            response_time_ms=response_time_ms,
        )
    )
    repo.bump_daily_stats(_utc_day(now).isoformat(), was_correct)

    logger.debug(
        "Card %s reviewed (%s): %s, next review %s",
        flashcard_id,
        "correct" if was_correct else "incorrect",
        record.status.value,
        record.next_review_at.isoformat(),
    )
    return record


def _utc_day(value: datetime) -> date:
    """Calendar day of *value* in UTC (naive values are taken as UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).date()


def due_cards(
    repo: ProgressRepository, now: datetime | None = None, limit: int = 20
) -> list[str]:
    """Ids of cards due for review (overdue or ``needs_review``), earliest first."""
    return [r.flashcard_id for r in repo.list_due(now or utcnow(), limit=limit)]


def progress_summary(repo: ProgressRepository, total_cards: int) -> ProgressSummary:
    """Count cards per mastery state; cards without progress count as new."""
    counts = repo.count_by_status()
    mastered = counts[ProgressStatus.MASTERED]
    learning = counts[ProgressStatus.LEARNING]
    needs_review = counts[ProgressStatus.NEEDS_REVIEW]
    return ProgressSummary(
        total=total_cards,
        mastered=mastered,
        learning=learning,
        needs_review=needs_review,
        new=max(total_cards - (mastered + learning + needs_review), 0),
    )


def study_streak(repo: ProgressRepository, today: date | None = None) -> int:
    """Number of consecutive days, ending today, with at least one review."""
    today = today or utcnow().date()
    days = {
        s.date
        for s in repo.list_daily_stats(newest_first=True, limit=_STREAK_LOOKBACK_DAYS)
        if s.cards_studied > 0
    }
    streak = 0
    while (today - timedelta(days=streak)).isoformat() in days:
        streak += 1
    return streak


def activity_level(cards_studied: int, busiest: int) -> int:
    if cards_studied <= 0:
        return 0
    ratio = cards_studied / max(busiest, 1)
    if ratio > 0.75:
        return 4
    if ratio > 0.5:
        return 3
    if ratio > 0.25:
        return 2
    return 1


def streak_calendar(
    repo: ProgressRepository, today: date | None = None, days: int = 49
) -> list[CalendarDay]:
    """Activity per day for the last *days* days (oldest first), levelled 0–4."""
    today = today or utcnow().date()
    start = today - timedelta(days=days - 1)
    studied = {s.date: s.cards_studied for s in repo.list_daily_stats(since=start.isoformat())}
    busiest = max(studied.values(), default=0)

    calendar: list[CalendarDay] = []
    for offset in range(days):
        day = (start + timedelta(days=offset)).isoformat()
        count = studied.get(day, 0)
        calendar.append(CalendarDay(date=day, cards_studied=count, level=activity_level(count, busiest)))
    return calendar
