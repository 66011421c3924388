"""docrag ingest — upload documents into the local store.

Each file goes through: validation (type, size) → original stored →
extraction → cleaning → chunking → batched embedding → embeddings, cleaned
content and metadata record stored. One failing file does not stop the rest;
the command exits 1 if any file failed.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import httpx
import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from docrag.api.litellm_client import MissingApiKeyError
from docrag.cli.errors import (
    err_api_failed,
    err_api_unreachable,
    err_empty_document,
    err_extraction_failed,
    err_no_api_key,
    err_unsupported_file,
)
from docrag.cli.runtime import Runtime, load_config_or_exit, open_runtime
from docrag.config import DocragConfig
from docrag.errors import ApiError, EmptyContentError, ExtractionError, UploadValidationError
from docrag.ingest.extractor import SourceFile
from docrag.ingest.upload import DocumentUploader, content_key, validate_upload

console = Console()


def ingest_cmd(
    paths: Annotated[
        list[Path],
        typer.Argument(help="Files to ingest.", exists=True, dir_okay=False, readable=True),
    ],
    document_id: Annotated[
        str | None,
        typer.Option("--id", help="Document id (single file only). Defaults to a content hash."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Replace existing documents without asking."),
    ] = False,
) -> None:
    """Ingest one or more documents into the knowledge base."""
    if document_id and len(paths) > 1:
        console.print("[red]Error:[/] --id can only be used with a single file.")
        raise typer.Exit(1)

    cfg = load_config_or_exit(console)
    failures = asyncio.run(_ingest_all(cfg, paths, document_id, yes))
    if failures:
        raise typer.Exit(1)


async def _ingest_all(
    cfg: DocragConfig, paths: list[Path], document_id: str | None, yes: bool
) -> int:
    failures = 0
    async with open_runtime(cfg) as rt:
        uploader = DocumentUploader(
            rt.processor, rt.repository, rt.client, max_file_size=cfg.upload.max_file_size
        )
        for path in paths:
            ok = await _ingest_one(cfg, rt, uploader, path, document_id, yes)
            failures += 0 if ok else 1
    return failures


async def _ingest_one(
    cfg: DocragConfig,
    rt: Runtime,
    uploader: DocumentUploader,
    path: Path,
    document_id: str | None,
    yes: bool,
) -> bool:
    console.print(f"\n[bold]→ {path}[/]")
    file = SourceFile.from_path(path)

    try:
        validate_upload(file, cfg.upload.max_file_size)
    except UploadValidationError as exc:
        console.print(err_unsupported_file(str(path), str(exc)))
        return False

    doc_id = document_id or content_key(path.read_bytes())
    try:
        existing = await rt.repository.get_record(doc_id)
    except ValueError as exc:
        console.print(f"  [red]Error:[/] {exc}")
        return False
    if existing is not None and existing.status == "ready" and not yes:
        if not typer.confirm(f"  '{doc_id}' already exists. Replace it?", default=False):
            console.print("  [dim]Skipped.[/]")
            return True

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        transient=True,
        console=console,
    ) as prog:
        task = prog.add_task("Uploading…", total=100)

        def _on_progress(percent: float, stage: str) -> None:
            prog.update(task, completed=percent, description=f"{stage.capitalize()}…")

        try:
            record = await uploader.upload(file, document_id=doc_id, on_progress=_on_progress)
        except ExtractionError as exc:
            console.print(err_extraction_failed(str(path), str(exc)))
            return False
        except EmptyContentError:
            console.print(err_empty_document(str(path)))
            return False
        except ApiError as exc:
            console.print(err_api_failed(exc.status, str(exc)))
            return False
        except httpx.HTTPError as exc:
            console.print(err_api_unreachable(cfg.api.base_url, str(exc)))
            return False
        except MissingApiKeyError:
            console.print(err_no_api_key(cfg.api.provider))
            return False

    embedding = await rt.repository.get_embedding(record.document_id)
    chunks = embedding.metadata.total_chunks if embedding else 0
    console.print(f"  [green]✓[/] {record.document_id} — {chunks} chunks embedded and stored")
    return True
