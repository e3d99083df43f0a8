"""studydeck database layer."""

from studydeck.db.connection import Database
from studydeck.db.migrations import MIGRATIONS, run_migrations
from studydeck.db.progress import ProgressRepository
from studydeck.db.repository import Repository
from studydeck.db.schema import initialize
from studydeck.db.vectors import ensure_vec_table, model_to_slug, vec_table_name

__all__ = [
    "Database",
    "MIGRATIONS",
    "ProgressRepository",
    "Repository",
    "ensure_vec_table",
    "initialize",
    "model_to_slug",
    "run_migrations",
    "vec_table_name",
]
