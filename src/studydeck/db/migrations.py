"""Forward-only migration runner for the studydeck schema.

Vec tables (vec_chunks_*) are NOT migration-managed; use ensure_vec_table().
"""

from __future__ import annotations

import sqlite3

# schema_version is the bootstrap table, created before migrations run.
_CREATE_SCHEMA_VERSION = """
CREATE TABLE IF NOT EXISTS schema_version (
    version     INTEGER NOT NULL,
    applied_at  DATETIME NOT NULL DEFAULT (datetime('now'))
)
"""

_V1_SQL = """
CREATE TABLE IF NOT EXISTS documents (
    id              TEXT PRIMARY KEY,
    name            TEXT NOT NULL,
    file_path       TEXT NOT NULL DEFAULT '',
    file_type       TEXT NOT NULL DEFAULT 'text',
    status          TEXT NOT NULL DEFAULT 'pending',
    total_chunks    INTEGER NOT NULL DEFAULT 0,
    error_message   TEXT,
    created_at      DATETIME NOT NULL DEFAULT (datetime('now')),
    updated_at      DATETIME NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS document_chunks (
    id              INTEGER PRIMARY KEY,
    document_id     TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    chunk_index     INTEGER NOT NULL,
    content         TEXT NOT NULL,
    page_number     INTEGER,
    created_at      DATETIME NOT NULL DEFAULT (datetime('now')),
    UNIQUE (document_id, chunk_index)
);

CREATE TABLE IF NOT EXISTS progress (
    flashcard_id      TEXT PRIMARY KEY,
    status            TEXT NOT NULL DEFAULT 'new',
    times_reviewed    INTEGER NOT NULL DEFAULT 0,
    times_correct     INTEGER NOT NULL DEFAULT 0,
    last_reviewed_at  TEXT,
    next_review_at    TEXT,
    created_at        DATETIME NOT NULL DEFAULT (datetime('now')),
    updated_at        DATETIME NOT NULL DEFAULT (datetime('now')),
    CHECK (times_correct <= times_reviewed)
);

CREATE INDEX IF NOT EXISTS idx_progress_next_review ON progress(next_review_at);

CREATE TABLE IF NOT EXISTS study_history (
    id                INTEGER PRIMARY KEY,
    flashcard_id      TEXT NOT NULL,
    was_correct       INTEGER NOT NULL,
    response_time_ms  INTEGER,
    reviewed_at       TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS daily_stats (
    date            TEXT PRIMARY KEY,
    cards_studied   INTEGER NOT NULL DEFAULT 0,
    cards_correct   INTEGER NOT NULL DEFAULT 0
);
"""

# Append-only. Each entry: (version: int, sql: str).
# executescript() issues an implicit COMMIT before running.
MIGRATIONS: list[tuple[int, str]] = [
    (1, _V1_SQL),
]


def current_version(conn: sqlite3.Connection) -> int:
    """Return the highest applied migration version (0 for a fresh database)."""
    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    return row[0] if row[0] is not None else 0


def run_migrations(conn: sqlite3.Connection) -> None:
    """Apply all pending migrations in ascending version order.

    Idempotent: safe to call on a database at any version.
    """
    conn.execute(_CREATE_SCHEMA_VERSION)
    conn.commit()

    applied = current_version(conn)
    for version, sql in MIGRATIONS:
        if version > applied:
            conn.executescript(sql)
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (version,)
            )
            conn.commit()
