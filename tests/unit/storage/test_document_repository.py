"""Tests for DocumentRepository."""

from __future__ import annotations

import json

import pytest

from docrag.models import DocumentEmbedding, DocumentMetadata, EmbeddingChunk, UploadRecord
from docrag.storage.blob import LocalBlobStore
from docrag.storage.repository import DocumentRepository


def _embedding(doc_id: str = "doc1") -> DocumentEmbedding:
    chunk = EmbeddingChunk(
        content="Some chunk text.", index=0, embedding=[0.5, 0.25], word_count=3, char_count=16
    )
    meta = DocumentMetadata(
        file_name="notes.txt",
        file_type="Text Document",
        total_chunks=1,
        chunk_size=300,
        processed_at="2024-05-01T10:00:00+00:00",
        total_characters=16,
        avg_chunk_size=16,
        embedding_model="text-embedding-3-small",
    )
    return DocumentEmbedding(document_id=doc_id, chunks=[chunk], metadata=meta)


def _record(doc_id: str = "doc1", uploaded_at: str = "2024-05-01T10:00:00+00:00", **kw) -> UploadRecord:
    return UploadRecord(
        original_file_name="notes.txt",
        document_id=doc_id,
        file_size=16,
        mime_type="text/plain",
        uploaded_at=uploaded_at,
        **kw,
    )


# ------------------------------------------------------------------
# Construction / paths
# ------------------------------------------------------------------


@pytest.mark.parametrize("namespace", ["", "a/b", ".", ".."])
def test_invalid_namespace(blob_store, namespace):
    with pytest.raises(ValueError):
        DocumentRepository(blob_store, namespace)


@pytest.mark.parametrize("doc_id", ["", "x/y", ".."])
def test_invalid_document_id(repository, doc_id):
    with pytest.raises(ValueError):
        repository.folder(doc_id)


def test_folder_layout(repository):
    assert repository.prefix == "database/tester"
    assert repository.folder("abc") == "database/tester/abc"


# ------------------------------------------------------------------
# Writes + reads
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_embedding_round_trip(repository, blob_store):
    await repository.save_embedding(_embedding())

    assert await repository.get_embedding("doc1") == _embedding()
    raw = await blob_store.get_text("database/tester/doc1/doc1_embeddings.json")
    data = json.loads(raw)
    assert data["documentId"] == "doc1"
    assert data["chunks"][0]["wordCount"] == 3
    assert data["metadata"]["embeddingModel"] == "text-embedding-3-small"


@pytest.mark.asyncio
async def test_content_and_record_round_trip(repository):
    await repository.save_content("doc1", "Cleaned text.")
    await repository.save_record(_record(status="ready", has_embeddings=True))

    assert await repository.get_content("doc1") == "Cleaned text."
    record = await repository.get_record("doc1")
    assert record.status == "ready"
    assert record.has_embeddings is True


@pytest.mark.asyncio
async def test_save_original_keeps_file_name(repository, blob_store):
    await repository.save_original("doc1", "reports/Q1 report.pdf", b"%PDF")

    assert await blob_store.exists("database/tester/doc1/Q1 report.pdf")


@pytest.mark.asyncio
async def test_missing_document_reads_none(repository):
    assert await repository.get_record("ghost") is None
    assert await repository.get_embedding("ghost") is None
    assert await repository.get_content("ghost") is None
    assert not await repository.has_document("ghost")


# ------------------------------------------------------------------
# Listing
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_documents_newest_first(repository):
    await repository.save_record(_record("old", uploaded_at="2024-01-01T00:00:00+00:00"))
    await repository.save_record(_record("new", uploaded_at="2024-06-01T00:00:00+00:00"))

    records = await repository.list_documents()

    assert [r.document_id for r in records] == ["new", "old"]


@pytest.mark.asyncio
async def test_list_documents_infers_missing_record(repository):
    await repository.save_original("legacy", "manual.pdf", b"%PDF")
    await repository.save_embedding(_embedding("legacy"))

    [record] = await repository.list_documents()

    assert record.document_id == "legacy"
    assert record.original_file_name == "manual.pdf"
    assert record.mime_type == "application/pdf"
    assert record.status == "ready"
    assert record.has_embeddings is True


@pytest.mark.asyncio
async def test_namespaces_are_isolated(blob_store):
    alice = DocumentRepository(blob_store, "alice")
    bob = DocumentRepository(blob_store, "bob")
    await alice.save_embedding(_embedding("a1"))

    assert len(await alice.load_embeddings()) == 1
    assert await bob.load_embeddings() == []
    assert await bob.list_documents() == []


@pytest.mark.asyncio
async def test_load_embeddings_skips_folders_without_embeddings(repository):
    await repository.save_embedding(_embedding("with"))
    await repository.save_record(_record("without", status="error", error="boom"))

    embeddings = await repository.load_embeddings()

    assert [e.document_id for e in embeddings] == ["with"]


# ------------------------------------------------------------------
# Delete / usage
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_delete_document(repository):
    await repository.save_embedding(_embedding())
    await repository.save_content("doc1", "text")

    assert await repository.delete_document("doc1") is True
    assert await repository.get_embedding("doc1") is None
    assert await repository.delete_document("doc1") is False


@pytest.mark.asyncio
async def test_reset_document_is_noop_when_absent(repository):
    await repository.reset_document("ghost")


@pytest.mark.asyncio
async def test_storage_usage(repository, tmp_path):
    await repository.save_content("doc1", "12345")
    await repository.save_content("doc2", "123")

    assert await repository.storage_usage() == (2, 8)


@pytest.mark.asyncio
async def test_repository_over_fresh_store(tmp_path):
    repo = DocumentRepository(LocalBlobStore(tmp_path / "never-created"))

    assert await repo.list_documents() == []
    assert await repo.storage_usage() == (0, 0)
