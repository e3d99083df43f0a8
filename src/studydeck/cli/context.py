"""Host-side wiring shared by CLI commands: config, database, clients.

The CLI process owns every long-lived resource. Each command opens the
database and builds its clients here, then closes them on exit.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

import typer
from rich.console import Console

from studydeck.cli.errors import err_invalid_config, err_no_db
from studydeck.config import StudydeckConfig, load_config
from studydeck.db.connection import Database
from studydeck.db.schema import initialize
from studydeck.errors import ValidationError

console = Console()


def load_cli_config() -> StudydeckConfig:
    """Load config from the working directory, exiting with a message on error."""
    try:
        return load_config()
    except ValidationError as exc:
        console.print(err_invalid_config(str(exc)))
        raise typer.Exit(1) from exc


def resolve_db(db: Path | None, cfg: StudydeckConfig) -> Path:
    return db if db is not None else Path(cfg.database.path)


def open_db(path: Path, *, create: bool = False) -> sqlite3.Connection:
    """Open *path* with schema applied; exit with a hint if it does not exist."""
    if not create and not path.exists():
        console.print(err_no_db(str(path)))
        raise typer.Exit(1)
    conn = Database(path).connect()
    initialize(conn)
    return conn
