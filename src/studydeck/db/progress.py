"""Repository for review progress, study history and daily statistics.

Timestamps are stored as ISO-8601 UTC strings with a fixed microsecond
precision so that SQL string comparison matches chronological order.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone

from studydeck.db.models import DailyStats, ProgressStatus, ReviewRecord, StudyEvent


def to_iso(value: datetime) -> str:
    """Serialise *value* as a sortable UTC ISO string (naive values are taken as UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ProgressRepository:
    """Read-one / upsert-by-key access to ReviewRecords plus study aggregates.

    Upserts are keyed on ``flashcard_id``; concurrent writers resolve
    last-writer-wins.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def get_progress(self, flashcard_id: str) -> ReviewRecord | None:
        row = self._conn.execute(
            """
            SELECT flashcard_id, status, times_reviewed, times_correct,
                   last_reviewed_at, next_review_at, created_at, updated_at
            FROM progress WHERE flashcard_id = ?
            """,
            (flashcard_id,),
        ).fetchone()
        return _row_to_record(row) if row else None

    def upsert_progress(self, record: ReviewRecord) -> None:
        self._conn.execute(
            """
            INSERT INTO progress (
                flashcard_id, status, times_reviewed, times_correct,
                last_reviewed_at, next_review_at
            )
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(flashcard_id) DO UPDATE SET
                status = excluded.status,
                times_reviewed = excluded.times_reviewed,
                times_correct = excluded.times_correct,
                last_reviewed_at = excluded.last_reviewed_at,
                next_review_at = excluded.next_review_at,
                updated_at = datetime('now')
            """,
            (
                record.flashcard_id,
                ProgressStatus(record.status).value,
                record.times_reviewed,
                record.times_correct,
                to_iso(record.last_reviewed_at) if record.last_reviewed_at else None,
                to_iso(record.next_review_at) if record.next_review_at else None,
            ),
        )
        self._conn.commit()

    def list_due(self, now: datetime, limit: int = 20) -> list[ReviewRecord]:
        """Records with ``next_review_at <= now`` or status ``needs_review``.

        Ordered by due date ascending (undated records first), capped at *limit*.
        """
        rows = self._conn.execute(
            """
            SELECT flashcard_id, status, times_reviewed, times_correct,
                   last_reviewed_at, next_review_at, created_at, updated_at
            FROM progress
            WHERE next_review_at <= ? OR status = ?
            ORDER BY next_review_at ASC, flashcard_id ASC
            LIMIT ?
            """,
            (to_iso(now), ProgressStatus.NEEDS_REVIEW.value, limit),
        ).fetchall()
        return [_row_to_record(r) for r in rows]

    def count_by_status(self) -> dict[ProgressStatus, int]:
        counts = {status: 0 for status in ProgressStatus}
        for row in self._conn.execute(
            "SELECT status, COUNT(*) AS n FROM progress GROUP BY status"
        ).fetchall():
            counts[ProgressStatus(row["status"])] = row["n"]
        return counts

    # ------------------------------------------------------------------
    # Study history
    # ------------------------------------------------------------------

    def add_study_event(self, event: StudyEvent) -> None:
        self._conn.execute(
            """
            INSERT INTO study_history (flashcard_id, was_correct, response_time_ms, reviewed_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                event.flashcard_id,
                int(event.was_correct),
                event.response_time_ms,
                to_iso(event.reviewed_at),
            ),
        )
        self._conn.commit()

    def list_study_events(self, flashcard_id: str) -> list[StudyEvent]:
        rows = self._conn.execute(
            """
            SELECT flashcard_id, was_correct, response_time_ms, reviewed_at
            FROM study_history WHERE flashcard_id = ? ORDER BY id
            """,
            (flashcard_id,),
        ).fetchall()
        return [
            StudyEvent(
                flashcard_id=r["flashcard_id"],
                was_correct=bool(r["was_correct"]),
                response_time_ms=r["response_time_ms"],
                reviewed_at=from_iso(r["reviewed_at"]),
            )
            for r in rows
        ]

    # ------------------------------------------------------------------
    # Daily stats
    # ------------------------------------------------------------------

    def bump_daily_stats(self, day: str, was_correct: bool) -> None:
        """Count one studied card (and optionally one correct) against *day*."""
        self._conn.execute(
            """
            INSERT INTO daily_stats (date, cards_studied, cards_correct)
            VALUES (?, 1, ?)
            ON CONFLICT(date) DO UPDATE SET
                cards_studied = cards_studied + 1,
                cards_correct = cards_correct + excluded.cards_correct
            """,
            (day, int(was_correct)),
        )
        self._conn.commit()

    def get_daily_stats(self, day: str) -> DailyStats | None:
        row = self._conn.execute(
            "SELECT date, cards_studied, cards_correct FROM daily_stats WHERE date = ?",
            (day,),
        ).fetchone()
        return _row_to_stats(row) if row else None

    def list_daily_stats(
        self, *, since: str | None = None, limit: int | None = None, newest_first: bool = False
    ) -> list[DailyStats]:
        sql = "SELECT date, cards_studied, cards_correct FROM daily_stats"
        params: list[object] = []
        if since is not None:
            sql += " WHERE date >= ?"
            params.append(since)
        sql += " ORDER BY date DESC" if newest_first else " ORDER BY date ASC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        return [_row_to_stats(r) for r in self._conn.execute(sql, params).fetchall()]


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _row_to_record(row: sqlite3.Row) -> ReviewRecord:
    return ReviewRecord(
        flashcard_id=row["flashcard_id"],
        status=ProgressStatus(row["status"]),
        times_reviewed=row["times_reviewed"],
        times_correct=row["times_correct"],
        last_reviewed_at=from_iso(row["last_reviewed_at"]),
        next_review_at=from_iso(row["next_review_at"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_stats(row: sqlite3.Row) -> DailyStats:
    return DailyStats(
        date=row["date"],
        cards_studied=row["cards_studied"],
        cards_correct=row["cards_correct"],
    )
