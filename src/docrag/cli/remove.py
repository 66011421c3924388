"""docrag remove — delete a stored document.

Removes the document folder: original file, embeddings, cleaned content and
metadata record.

Usage:
  docrag remove 3f2a9c0d1e4b5a6c7d8e
  docrag remove 3f2a9c0d1e4b5a6c7d8e --yes
"""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console

from docrag.cli.errors import err_document_not_found
from docrag.cli.runtime import build_repository, load_config_or_exit

console = Console()


def remove_cmd(
    document_id: Annotated[str, typer.Argument(help="Document id (see `docrag status`).")],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Remove a document and all its stored data."""
    cfg = load_config_or_exit(console)
    repo = build_repository(cfg)

    try:
        exists = asyncio.run(repo.has_document(document_id))
    except ValueError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(1) from exc

    if not exists:
        console.print(err_document_not_found(document_id))
        raise typer.Exit(1)

    record = asyncio.run(repo.get_record(document_id))
    name = record.original_file_name if record else document_id
    console.print(f"\nRemove document: [bold]{document_id}[/] ({name})")

    if not yes:
        if not typer.confirm("Confirm removal?", default=False):
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)

    asyncio.run(repo.delete_document(document_id))
    console.print(f"[green]✓[/] Removed {document_id}")
