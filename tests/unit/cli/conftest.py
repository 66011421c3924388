"""Fixtures for CLI tests: isolated config, storage and a stub client."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from rich.console import Console

from docrag.storage.blob import LocalBlobStore
from docrag.storage.repository import DocumentRepository


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, stub_client):
    """Run commands in *tmp_path* with no global config and the stub client."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("docrag.config._GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    monkeypatch.setenv("DOCRAG_STORAGE_ROOT", str(tmp_path / "store"))
    monkeypatch.setattr("docrag.cli.runtime.build_client", lambda cfg: stub_client)
    return tmp_path


@pytest.fixture(autouse=True)
def _wide_console(monkeypatch: pytest.MonkeyPatch):
    """Keep rich from wrapping messages at the runner's 80 columns."""
    for module in ("init", "ingest", "search", "status", "remove"):
        monkeypatch.setattr(f"docrag.cli.{module}.console", Console(width=200))


@pytest.fixture
def stored(cli_env: Path):
    """Synchronous view of the repository the CLI writes to."""
    repo = DocumentRepository(LocalBlobStore(cli_env / "store"), "local")

    class _Stored:
        repository = repo

        def records(self):
            return asyncio.run(repo.list_documents())

        def record(self, document_id: str):
            return asyncio.run(repo.get_record(document_id))

        def embedding(self, document_id: str):
            return asyncio.run(repo.get_embedding(document_id))

    return _Stored()
