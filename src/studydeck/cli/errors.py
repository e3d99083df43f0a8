"""Rich error messages for the studydeck CLI.

Every error shown to the user states what went wrong and the exact action
that fixes it.

Usage:
    from studydeck.cli.errors import err_no_db
    console.print(err_no_db(".studydeck.db"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from studydeck.ingest.embedder import credential_env_var, provider_of


def err_no_api_key(model: str) -> str:
    """No credential for the embedding provider of *model*."""
    provider = provider_of(model)
    env_var = credential_env_var(model) or f"{provider.upper()}_API_KEY"
    return (
        f"[red]Error:[/] No API key for '{provider}'.\n"
        f"  Set:  export {env_var}=sk-..."
    )


def err_no_db(db_path: str = ".studydeck.db") -> str:
    return (
        f"[red]Error:[/] No database found at '{db_path}'.\n"
        "  Run:  studydeck init"
    )


def err_file_not_found(path: str) -> str:
    return (
        f"[red]Error:[/] File not found: '{path}'\n"
        "  Check the path and try again."
    )


def err_unsupported_file(path: str, suffix: str) -> str:
    """PDF and other binary formats must be converted to text first."""
    return (
        f"[red]Error:[/] Unsupported file type {suffix!r}: '{path}'\n"
        "  Ingest plain text (.txt, .md). For PDFs, extract the text first and\n"
        "  mark page breaks with [PAGE n] to keep page citations."
    )


def err_upstream(message: str) -> str:
    return (
        f"[red]Error:[/] Embedding service failed: {message}\n"
        "  Check your network connection and API quota, then retry."
    )


def err_invalid_config(message: str) -> str:
    return (
        f"[red]Error:[/] Invalid configuration: {message}\n"
        "  Fix studydeck.yaml (or ~/.studydeck/config.yaml) and retry."
    )


def err_document_not_found(document_id: str) -> str:
    return (
        f"[yellow]Document not found:[/] '{document_id}'\n"
        "  Run:  studydeck documents  to list ingested documents."
    )


def warn_search_unavailable() -> str:
    return (
        "[yellow]Warning:[/] Document search is not configured — answering without context.\n"
        "  Set OPENAI_API_KEY (or the key for your embedding provider) to enable it."
    )
