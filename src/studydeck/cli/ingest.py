"""studydeck ingest: chunk, embed and store a text document.

Accepts extracted plain text (.txt, .md, .text). Text containing
``[PAGE n]`` markers is chunked per page so citations carry page numbers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from studydeck.cli.context import console, load_cli_config, open_db, resolve_db
from studydeck.cli.errors import (
    err_file_not_found,
    err_no_api_key,
    err_unsupported_file,
    err_upstream,
)
from studydeck.db.repository import Repository
from studydeck.errors import UpstreamError, ValidationError
from studydeck.ingest.base import estimate_tokens
from studydeck.ingest.chunker import has_page_markers
from studydeck.ingest.embedder import embedding_client_or_none
from studydeck.ingest.writer import DocumentIngestor
from studydeck.rag.vector_store import VectorStore

_TEXT_EXTS = {".txt", ".md", ".markdown", ".text"}


def ingest_cmd(
    path: Annotated[Path, typer.Argument(help="Text file to ingest.")],
    name: Annotated[
        str | None,
        typer.Option("--name", "-n", help="Display name used in citations (default: file name)."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (default: database.path from config)."),
    ] = None,
) -> None:
    """Ingest a document into the searchable study library."""
    if not path.exists():
        console.print(err_file_not_found(str(path)))
        raise typer.Exit(1)
    if path.suffix.lower() not in _TEXT_EXTS:
        console.print(err_unsupported_file(str(path), path.suffix))
        raise typer.Exit(1)

    cfg = load_cli_config()
    embedder = embedding_client_or_none(cfg.embedding)
    if embedder is None:
        console.print(err_no_api_key(cfg.embedding.model))
        raise typer.Exit(1)

    text = path.read_text(encoding="utf-8", errors="replace")
    console.print(f"[bold]→ {path}[/] (~{estimate_tokens(text):,} tokens)")

    conn = open_db(resolve_db(db, cfg), create=True)
    try:
        ingestor = DocumentIngestor(
            Repository(conn),
            VectorStore(conn, cfg.embedding.model, cfg.embedding.dimensions),
            embedder,
            chunking=cfg.chunking,
            batch_size=cfg.embedding.batch_size,
        )
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            transient=True,
            console=console,
        ) as prog:
            task = prog.add_task("Embedding…", total=None)

            def _on_batch(done: int, total: int) -> None:
                prog.update(task, completed=done, total=total)

            result = ingestor.ingest_text(
                name or path.name,
                text,
                file_path=str(path),
                file_type="pdf" if has_page_markers(text) else "text",
                on_progress=_on_batch,
            )
    except ValidationError as exc:
        console.print(f"  [red]✗ Error:[/] {exc}")
        raise typer.Exit(1) from exc
    except UpstreamError as exc:
        console.print(err_upstream(exc.message))
        raise typer.Exit(1) from exc
    finally:
        conn.close()

    console.print(
        f"  [green]✓[/] {result.chunks_created} chunks stored "
        f"(document {result.document_id}, ~{result.tokens_used:,} tokens embedded)"
    )
