"""Spaced-repetition scheduling and study statistics."""

from studydeck.study.exam import sample_questions
from studydeck.study.scheduler import (
    ScheduleResult,
    apply_review,
    readiness,
    schedule,
    sort_by_priority,
)
from studydeck.study.session import (
    CalendarDay,
    ProgressSummary,
    due_cards,
    progress_summary,
    record_review,
    streak_calendar,
    study_streak,
)

__all__ = [
    "CalendarDay",
    "ProgressSummary",
    "ScheduleResult",
    "apply_review",
    "due_cards",
    "progress_summary",
    "readiness",
    "record_review",
    "sample_questions",
    "schedule",
    "sort_by_priority",
    "streak_calendar",
    "study_streak",
]
