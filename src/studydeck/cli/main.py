"""studydeck CLI entry point."""

from __future__ import annotations

import importlib.metadata
import os
from typing import Annotated

import typer

from studydeck.cli.documents import documents_cmd, remove_cmd
from studydeck.cli.ingest import ingest_cmd
from studydeck.cli.init import init_cmd
from studydeck.cli.search import search_cmd
from studydeck.cli.study import due_cmd, review_cmd, stats_cmd
from studydeck.log import configure_logging


def _version() -> str:
    try:
        return importlib.metadata.version("studydeck")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"studydeck {_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="studydeck",
    help=(
        "studydeck — flashcard scheduling and document search for self-study.\n\n"
        "  studydeck ingest   Add a text document to the searchable library.\n"
        "  studydeck review   Record a flashcard answer and reschedule it."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """studydeck: flashcard scheduling and document search for self-study."""
    configure_logging("DEBUG" if verbose else os.environ.get("STUDYDECK_LOG_LEVEL", "WARNING"))


app.command("init")(init_cmd)
app.command("ingest")(ingest_cmd)
app.command("documents")(documents_cmd)
app.command("remove")(remove_cmd)
app.command("search")(search_cmd)
app.command("review")(review_cmd)
app.command("due")(due_cmd)
app.command("stats")(stats_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed studydeck version."""
    typer.echo(f"studydeck {_version()}")


if __name__ == "__main__":
    app()
