"""docrag CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from docrag.cli.ingest import ingest_cmd
from docrag.cli.init import init_cmd
from docrag.cli.remove import remove_cmd
from docrag.cli.runtime import setup_logging
from docrag.cli.search import search_cmd
from docrag.cli.status import status_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("docrag")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"docrag {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="docrag",
    help=(
        "docrag — document ingestion and semantic search.\n\n"
        "  docrag init     Create config files and the local document store.\n"
        "  docrag ingest   Extract, chunk and embed documents into the local store.\n"
        "  docrag search   Rank stored chunks by similarity to a query."
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
        typer.Option("--verbose", "-v", help="Show debug logging."),
    ] = False,
) -> None:
    """docrag — document ingestion and semantic search."""
    setup_logging(verbose)


app.command("init")(init_cmd)
app.command("ingest")(ingest_cmd)
app.command("search")(search_cmd)
app.command("status")(status_cmd)
app.command("remove")(remove_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed docrag version."""
    typer.echo(f"docrag {_installed_version()}")


if __name__ == "__main__":
    app()
