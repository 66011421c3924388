"""docrag status — stored documents, embedding settings and storage usage.

Works without a reachable backend: everything shown comes from the local
config and the blob store.
"""

from __future__ import annotations

import asyncio

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from docrag.cli.runtime import build_processor, build_repository, load_config_or_exit
from docrag.config import DocragConfig
from docrag.models import UploadRecord
from docrag.storage.repository import DocumentRepository

console = Console()

_STATUS_STYLE = {"ready": "green", "processing": "yellow", "error": "red"}


def status_cmd() -> None:
    """Show stored documents, embedding settings and storage usage."""
    cfg = load_config_or_exit(console)
    repo = build_repository(cfg)
    records, usage = asyncio.run(_gather(repo))

    # ---- Panel 1: Embedding ----
    _show_embedding_panel(cfg)

    # ---- Panel 2: Storage ----
    _show_storage_panel(cfg, repo, records, usage)

    # ---- Table: Documents ----
    if records:
        _show_documents_table(records)


async def _gather(repo: DocumentRepository) -> tuple[list[UploadRecord], tuple[int, int]]:
    return await repo.list_documents(), await repo.storage_usage()


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def _show_embedding_panel(cfg: DocragConfig) -> None:
    stats = build_processor(cfg).get_embedding_stats()
    backend = cfg.api.base_url if cfg.api.mode == "backend" else f"direct ({cfg.api.provider})"
    lines = [
        f"Model:       [bold]{stats.model}[/]",
        f"Dimensions:  {stats.dimensions}",
        f"Max tokens:  {stats.max_tokens:,}",
        f"Batch size:  {cfg.embedding.batch_size}",
        f"API:         {backend}",
    ]
    console.print(Panel("\n".join(lines), title="[bold]Embedding[/]", expand=False))


def _show_storage_panel(
    cfg: DocragConfig,
    repo: DocumentRepository,
    records: list[UploadRecord],
    usage: tuple[int, int],
) -> None:
    files, size = usage
    ready = sum(1 for r in records if r.status == "ready")
    failed = sum(1 for r in records if r.status == "error")
    lines = [
        f"Root:       {cfg.storage.root}/{repo.prefix}",
        f"Documents:  [bold]{len(records)}[/]  |  Ready: {ready}  |  Errors: {failed}",
        f"Files:      {files}  |  Size: {_format_size(size)}",
    ]
    if not records:
        lines.append("\n[yellow]No documents yet.[/]  Run:  docrag ingest PATH")
    console.print(Panel("\n".join(lines), title="[bold]Storage[/]", expand=False))


def _show_documents_table(records: list[UploadRecord]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Document ID", no_wrap=True)
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Status")
    table.add_column("Uploaded")

    for record in records:
        style = _STATUS_STYLE.get(record.status, "white")
        status = f"[{style}]{record.status}[/]"
        if record.error:
            status += f"\n[dim]{record.error}[/]"
        table.add_row(
            record.document_id,
            record.original_file_name,
            _format_size(record.file_size),
            status,
            record.uploaded_at[:19].replace("T", " ") or "—",
        )
    console.print(table)


def _format_size(num_bytes: int) -> str:
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes / (1024 * 1024):.1f} MB"
