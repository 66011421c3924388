"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from docrag.api.client import EMBEDDINGS_PATH
from docrag.errors import ApiError
from docrag.storage.blob import LocalBlobStore
from docrag.storage.repository import DocumentRepository

_ENV_VARS = (
    "DOCRAG_API_URL",
    "DOCRAG_API_KEY",
    "DOCRAG_EMBEDDING_MODEL",
    "DOCRAG_STORAGE_ROOT",
    "DOCRAG_LOG_LEVEL",
)


def fake_vector(text: str) -> list[float]:
    """Deterministic 3-d vector for *text* (never zero magnitude)."""
    return [float(len(text)), float(len(text.split())), 1.0]


class StubApiClient:
    """In-memory ``JsonPoster``: records every call and answers embeddings.

    Args:
        vector_for: Maps a text to its embedding.
        fail_on_call: 1-based call number that raises ``ApiError`` instead.
        responses: Canned replies per path, returned for non-embedding routes.
    """

    def __init__(
        self,
        vector_for=fake_vector,
        fail_on_call: int | None = None,
        responses: dict[str, Any] | None = None,
    ) -> None:
        self.vector_for = vector_for
        self.fail_on_call = fail_on_call
        self.responses = responses or {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    async def post(self, path: str, payload: dict[str, Any]) -> Any:
        self.calls.append((path, payload))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise ApiError("Internal Server Error", status=500)
        if path == EMBEDDINGS_PATH:
            return {"embeddings": [self.vector_for(t) for t in payload["texts"]]}
        if path in self.responses:
            return self.responses[path]
        raise ApiError(f"No route {path}", status=404)

    async def aclose(self) -> None:
        self.closed = True

    @property
    def embedded_texts(self) -> list[list[str]]:
        return [p["texts"] for path, p in self.calls if path == EMBEDDINGS_PATH]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's DOCRAG_* environment out of every test."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def stub_client() -> StubApiClient:
    return StubApiClient()


@pytest.fixture
def make_client():
    """Factory for clients with custom vectors, failures or canned replies."""
    return StubApiClient


@pytest.fixture
def blob_store(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "store")


@pytest.fixture
def repository(blob_store: LocalBlobStore) -> DocumentRepository:
    return DocumentRepository(blob_store, namespace="tester")

