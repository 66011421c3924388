"""docrag search — semantic search over stored document embeddings.

Usage:
  docrag search "how do I reset the device"
  docrag search "warranty terms" --top-k 3 --threshold 0.5
"""

from __future__ import annotations

import asyncio
from typing import Annotated

import httpx
import typer
from rich.console import Console
from rich.table import Table

from docrag.api.litellm_client import MissingApiKeyError
from docrag.cli.errors import (
    err_api_failed,
    err_api_unreachable,
    err_dimension_mismatch,
    err_no_api_key,
    err_no_documents,
)
from docrag.cli.runtime import load_config_or_exit, open_runtime
from docrag.config import DocragConfig
from docrag.errors import ApiError, DimensionMismatchError
from docrag.models import SearchOptions, SearchResult

console = Console()

_PREVIEW_CHARS = 160


def search_cmd(
    query: Annotated[str, typer.Argument(help="Natural-language query.")],
    top_k: Annotated[
        int | None,
        typer.Option("--top-k", "-k", min=1, help="Maximum results (default: search.top_k)."),
    ] = None,
    threshold: Annotated[
        float | None,
        typer.Option(
            "--threshold", "-t", min=-1.0, max=1.0,
            help="Minimum cosine similarity (default: search.threshold).",
        ),
    ] = None,
    no_metadata: Annotated[
        bool,
        typer.Option("--no-metadata", help="Hide source file names."),
    ] = False,
) -> None:
    """Find the chunks most similar to QUERY across all documents."""
    if not query.strip():
        console.print("[red]Error:[/] Query must not be empty.")
        raise typer.Exit(1)

    cfg = load_config_or_exit(console)
    options = SearchOptions(
        top_k=top_k if top_k is not None else cfg.search.top_k,
        threshold=threshold if threshold is not None else cfg.search.threshold,
        include_metadata=cfg.search.include_metadata and not no_metadata,
    )

    results = asyncio.run(_search(cfg, query, options))
    if results is None:
        raise typer.Exit(1)
    if not results:
        console.print(
            f"[yellow]No chunks scored at or above {options.threshold}.[/]\n"
            "  Lower the threshold:  --threshold 0.5"
        )
        return
    _print_results(results)


async def _search(
    cfg: DocragConfig, query: str, options: SearchOptions
) -> list[SearchResult] | None:
    async with open_runtime(cfg) as rt:
        documents = await rt.repository.load_embeddings()
        if not documents:
            console.print(err_no_documents())
            return None
        try:
            return await rt.processor.search_documents(query, documents, rt.client, options)
        except DimensionMismatchError:
            console.print(err_dimension_mismatch(cfg.embedding.model))
        except ApiError as exc:
            console.print(err_api_failed(exc.status, str(exc)))
        except httpx.HTTPError as exc:
            console.print(err_api_unreachable(cfg.api.base_url, str(exc)))
        except MissingApiKeyError:
            console.print(err_no_api_key(cfg.api.provider))
    return None


def _print_results(results: list[SearchResult]) -> None:
    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("#", justify="right", width=3)
    table.add_column("Score", justify="right", width=6)
    table.add_column("Source", no_wrap=True)
    table.add_column("Chunk")

    for result in results:
        source = result.file_name or result.document_id
        text = result.chunk.content.replace("\n", " ")
        if len(text) > _PREVIEW_CHARS:
            text = text[:_PREVIEW_CHARS].rstrip() + "…"
        table.add_row(
            str(result.rank),
            f"{result.score:.3f}",
            f"{source} [dim]#{result.chunk.index}[/]",
            text,
        )
    console.print(table)
