"""studydeck documents / remove: list and delete ingested documents."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from studydeck.cli.context import console, load_cli_config, open_db, resolve_db
from studydeck.cli.errors import err_document_not_found
from studydeck.db.models import DocumentStatus
from studydeck.db.repository import Repository

_STATUS_STYLE = {
    DocumentStatus.READY: "green",
    DocumentStatus.PROCESSING: "yellow",
    DocumentStatus.PENDING: "dim",
    DocumentStatus.ERROR: "red",
}


def documents_cmd(
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (default: database.path from config)."),
    ] = None,
) -> None:
    """List ingested documents, newest first."""
    cfg = load_cli_config()
    conn = open_db(resolve_db(db, cfg))
    try:
        documents = Repository(conn).list_documents()
    finally:
        conn.close()

    if not documents:
        console.print("[dim]No documents ingested yet. Run:  studydeck ingest FILE[/]")
        return

    table = Table(title="Documents")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Chunks", justify="right")
    for doc in documents:
        style = _STATUS_STYLE.get(doc.status, "")
        status = doc.status.value
        if doc.error_message:
            status += f" ({doc.error_message})"
        table.add_row(doc.id, doc.name, f"[{style}]{status}[/]", str(doc.total_chunks))
    console.print(table)


def remove_cmd(
    document_id: Annotated[str, typer.Argument(help="Document ID (see: studydeck documents).")],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (default: database.path from config)."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip the confirmation prompt."),
    ] = False,
) -> None:
    """Delete a document together with its chunks and vectors."""
    cfg = load_cli_config()
    conn = open_db(resolve_db(db, cfg))
    try:
        repo = Repository(conn)
        document = repo.get_document(document_id)
        if document is None:
            console.print(err_document_not_found(document_id))
            raise typer.Exit(1)

        if not yes and not typer.confirm(
            f"Remove '{document.name}' and its {document.total_chunks} chunks?", default=False
        ):
            console.print("[dim]Aborted.[/]")
            raise typer.Exit(0)

        repo.delete_document(document_id)
    finally:
        conn.close()

    console.print(f"[green]✓[/] Removed '{document.name}'")
