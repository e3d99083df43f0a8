"""studydeck search: retrieve grounding context for a question."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.panel import Panel

from studydeck.cli.context import console, load_cli_config, open_db, resolve_db
from studydeck.cli.errors import warn_search_unavailable
from studydeck.ingest.embedder import embedding_client_or_none
from studydeck.rag.assembler import citations, format_context
from studydeck.rag.retriever import RetrieverConfig, search_documents
from studydeck.rag.vector_store import VectorStore


def search_cmd(
    query: Annotated[str, typer.Argument(help="Question or search text.")],
    threshold: Annotated[
        float | None,
        typer.Option("--threshold", "-t", help="Minimum similarity (default: retrieval.match_threshold)."),
    ] = None,
    count: Annotated[
        int | None,
        typer.Option("--count", "-k", min=1, help="Maximum results (default: retrieval.match_count)."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database path (default: database.path from config)."),
    ] = None,
) -> None:
    """Show the document passages most relevant to QUERY, with citations."""
    cfg = load_cli_config()
    retriever_cfg = RetrieverConfig(
        match_threshold=threshold if threshold is not None else cfg.retrieval.match_threshold,
        match_count=count if count is not None else cfg.retrieval.match_count,
    )

    embedder = embedding_client_or_none(cfg.embedding)
    if embedder is None:
        console.print(warn_search_unavailable())
        return

    conn = open_db(resolve_db(db, cfg))
    try:
        store = VectorStore(conn, cfg.embedding.model, cfg.embedding.dimensions)
        results = search_documents(query, embedder, store, retriever_cfg)
    finally:
        conn.close()

    if not results:
        console.print("[dim]No relevant passages found.[/]")
        return

    console.print(Panel(format_context(results), title="[bold]Context[/]", expand=False))
    for i, (citation, result) in enumerate(zip(citations(results), results), start=1):
        console.print(f"  [{i}] {citation}  [dim](similarity {result.similarity:.2f})[/]")
