"""studydeck review / due / stats: spaced-repetition study commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.panel import Panel
from rich.table import Table

from studydeck.cli.context import console, load_cli_config, open_db, resolve_db
from studydeck.db.models import ProgressStatus
from studydeck.db.progress import ProgressRepository
from studydeck.study.scheduler import sort_by_priority, utcnow
from studydeck.study.session import progress_summary, record_review, streak_calendar, study_streak

_STATUS_STYLE = {
    ProgressStatus.NEEDS_REVIEW: "red",
    ProgressStatus.NEW: "cyan",
    ProgressStatus.LEARNING: "yellow",
    ProgressStatus.MASTERED: "green",
}

_LEVEL_GLYPHS = "·░▒▓█"


def review_cmd(
    card_id: Annotated[str, typer.Argument(help="Flashcard ID.")],
    correct: Annotated[
        bool,
        typer.Option("--correct/--incorrect", help="Whether the card was answered correctly."),
    ],
    response_ms: Annotated[
        int | None,
        typer.Option("--response-ms", min=0, help="Answer time in milliseconds."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (default: database.path from config)."),
    ] = None,
) -> None:
    """Record one review of CARD_ID and show when it is due next."""
    cfg = load_cli_config()
    conn = open_db(resolve_db(db, cfg), create=True)
    try:
        record = record_review(
            ProgressRepository(conn), card_id, correct, response_time_ms=response_ms
        )
    finally:
        conn.close()

    style = _STATUS_STYLE[record.status]
    console.print(
        f"[{style}]{record.status.value}[/] — {record.times_correct}/{record.times_reviewed} correct, "
        f"next review {record.next_review_at:%Y-%m-%d %H:%M} UTC"
    )


def due_cmd(
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-l", min=1, help="Maximum cards (default: study.due_limit)."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (default: database.path from config)."),
    ] = None,
) -> None:
    """List cards due for review in study order."""
    cfg = load_cli_config()
    conn = open_db(resolve_db(db, cfg))
    try:
        records = ProgressRepository(conn).list_due(utcnow(), limit=limit or cfg.study.due_limit)
    finally:
        conn.close()

    if not records:
        console.print("[green]Nothing due — all caught up.[/]")
        return

    table = Table(title="Due for review")
    table.add_column("Card")
    table.add_column("Status")
    table.add_column("Correct", justify="right")
    table.add_column("Due (UTC)")
    for record in sort_by_priority(records):
        due = f"{record.next_review_at:%Y-%m-%d %H:%M}" if record.next_review_at else "-"
        style = _STATUS_STYLE[record.status]
        table.add_row(
            record.flashcard_id,
            f"[{style}]{record.status.value}[/]",
            f"{record.times_correct}/{record.times_reviewed}",
            due,
        )
    console.print(table)


def stats_cmd(
    total: Annotated[
        int,
        typer.Option("--total", min=0, help="Total number of flashcards in the deck."),
    ],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (default: database.path from config)."),
    ] = None,
) -> None:
    """Show mastery breakdown, exam readiness and study streak."""
    cfg = load_cli_config()
    conn = open_db(resolve_db(db, cfg))
    try:
        repo = ProgressRepository(conn)
        summary = progress_summary(repo, total)
        streak = study_streak(repo)
        calendar = streak_calendar(repo)
    finally:
        conn.close()

    lines = [
        f"Total cards:    {summary.total}",
        f"Mastered:       {summary.mastered}",
        f"Learning:       {summary.learning}",
        f"Needs review:   {summary.needs_review}",
        f"New:            {summary.new}",
        "",
        f"Exam readiness: [bold]{summary.readiness}%[/]",
        f"Study streak:   {streak} day{'s' if streak != 1 else ''}",
        "",
        "".join(_LEVEL_GLYPHS[day.level] for day in calendar),
    ]
    console.print(Panel("\n".join(lines), title="[bold]Progress[/]", expand=False))
