"""Wiring shared by CLI commands: config → client, processor, repository."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from docrag.api.client import ApiClient, JsonPoster
from docrag.api.litellm_client import LiteLLMEmbeddingClient
from docrag.cli.errors import err_config
from docrag.config import ConfigError, DocragConfig, load_config
from docrag.ingest.chunker import TextChunker
from docrag.ingest.embedding import EmbeddingConfig, EmbeddingService
from docrag.ingest.extractor import ContentExtractor
from docrag.ingest.processor import DocumentProcessor
from docrag.storage.blob import LocalBlobStore
from docrag.storage.repository import DocumentRepository


@dataclass
class Runtime:
    client: JsonPoster
    processor: DocumentProcessor
    repository: DocumentRepository


def load_config_or_exit(console: Console) -> DocragConfig:
    """Load config, printing an actionable message and exiting on error."""
    try:
        return load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1) from exc


def setup_logging(verbose: bool = False) -> None:
    """Route library logging through rich; WARNING unless *verbose*."""
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(os.environ.get("DOCRAG_LOG_LEVEL", "WARNING").upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=False, show_path=False)],
        force=True,
    )


def build_client(cfg: DocragConfig) -> ApiClient | LiteLLMEmbeddingClient:
    if cfg.api.mode == "direct":
        return LiteLLMEmbeddingClient(model=cfg.embedding.model, provider=cfg.api.provider)
    return ApiClient(cfg.api.base_url, api_key=cfg.api_key, timeout=cfg.api.timeout)


def build_processor(cfg: DocragConfig, client: JsonPoster | None = None) -> DocumentProcessor:
    """Processor configured from *cfg*.

    In backend mode the extractor sends PDF and Word files to the backend.
    """
    embedding = EmbeddingService(
        EmbeddingConfig(
            api_key=cfg.api_key,
            model=cfg.embedding.model,
            max_tokens=cfg.embedding.max_tokens,
            batch_size=cfg.embedding.batch_size,
        )
    )
    chunker = TextChunker(
        chunk_size=cfg.chunking.chunk_size,
        overlap=cfg.chunking.overlap,
        min_chunk_size=cfg.chunking.min_chunk_size,
        max_chunk_size=cfg.chunking.max_chunk_size,
    )
    extractor = ContentExtractor(api_client=client if cfg.api.mode == "backend" else None)
    return DocumentProcessor(extractor=extractor, chunker=chunker, embedding_service=embedding)


def build_repository(cfg: DocragConfig) -> DocumentRepository:
    return DocumentRepository(LocalBlobStore(Path(cfg.storage.root)), cfg.storage.namespace)


@asynccontextmanager
async def open_runtime(cfg: DocragConfig) -> AsyncIterator[Runtime]:
    """Build the runtime for one command and close the client afterwards."""
    client = build_client(cfg)
    try:
        yield Runtime(
            client=client,
            processor=build_processor(cfg, client),
            repository=build_repository(cfg),
        )
    finally:
        await client.aclose()
