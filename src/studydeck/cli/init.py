"""studydeck init: create the study database and a starter studydeck.yaml."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from studydeck.cli.context import console, load_cli_config, open_db, resolve_db
from studydeck.config import write_project_config
from studydeck.db.schema import CURRENT_VERSION
from studydeck.db.vectors import ensure_vec_table, model_to_slug


def init_cmd(
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (default: database.path from config)."),
    ] = None,
    no_config: Annotated[
        bool,
        typer.Option("--no-config", help="Do not write studydeck.yaml."),
    ] = False,
) -> None:
    """Initialise a study database in the current directory."""
    cfg = load_cli_config()
    path = resolve_db(db, cfg)
    existed = path.exists()

    conn = open_db(path, create=True)
    try:
        table = ensure_vec_table(conn, model_to_slug(cfg.embedding.model), cfg.embedding.dimensions)
    finally:
        conn.close()

    verb = "Updated" if existed else "Created"
    console.print(f"[green]✓[/] {verb} {path} (schema v{CURRENT_VERSION}, vectors: {table})")

    if not no_config:
        config_path = write_project_config(Path.cwd(), cfg)
        console.print(f"[green]✓[/] Config: {config_path.name}")
