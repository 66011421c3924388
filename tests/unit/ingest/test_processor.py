"""Tests for DocumentProcessor (extract → clean → chunk → embed → assemble)."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from docrag.errors import EmptyContentError, ExtractionError
from docrag.ingest.chunker import TextChunker
from docrag.ingest.embedding import EmbeddingConfig, EmbeddingService
from docrag.ingest.extractor import SourceFile
from docrag.ingest.processor import DocumentProcessor
from docrag.models import SearchOptions


def _text_file(tmp_path: Path, name: str, content: str) -> SourceFile:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return SourceFile.from_path(path)


def _fruit_vector(text: str) -> list[float]:
    return [1.0, 0.0] if "apple" in text.lower() else [0.0, 1.0]


# ------------------------------------------------------------------
# process_document
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_short_document_end_to_end(tmp_path, stub_client):
    text = "Sentence one. Sentence two. Sentence three."
    file = _text_file(tmp_path, "notes.txt", text)

    result = await DocumentProcessor().process_document(file, "doc-1", stub_client)

    assert result.document_id == "doc-1"
    assert len(result.chunks) == 1
    chunk = result.chunks[0]
    assert chunk.content == text
    assert chunk.index == 0
    assert chunk.word_count == 6
    assert chunk.char_count == len(text)
    assert chunk.embedding == [float(len(text)), 6.0, 1.0]

    meta = result.metadata
    assert meta.file_name == "notes.txt"
    assert meta.file_type == "Text Document"
    assert meta.total_chunks == 1
    assert meta.chunk_size == 300
    assert meta.total_characters == len(text)
    assert meta.avg_chunk_size == len(text)
    assert meta.embedding_model == "text-embedding-3-small"
    assert datetime.fromisoformat(meta.processed_at).tzinfo is not None

    assert len(stub_client.calls) == 1


@pytest.mark.asyncio
async def test_noise_only_document_rejected_before_embedding(tmp_path, stub_client):
    file = _text_file(tmp_path, "noise.txt", "ab\n--\n<br>\n")

    with pytest.raises(EmptyContentError, match="No valid chunks"):
        await DocumentProcessor().process_document(file, "doc-1", stub_client)

    assert stub_client.calls == []


@pytest.mark.asyncio
async def test_extraction_error_propagates(tmp_path, stub_client):
    file = _text_file(tmp_path, "empty.txt", "")

    with pytest.raises(ExtractionError):
        await DocumentProcessor().process_document(file, "doc-1", stub_client)
    assert stub_client.calls == []


@pytest.mark.asyncio
async def test_multi_chunk_document_metadata(tmp_path, stub_client):
    sentences = [f"Sentence number {i:02d} has some filler words in it." for i in range(20)]
    file = _text_file(tmp_path, "long.md", " ".join(sentences))
    processor = DocumentProcessor(embedding_service=EmbeddingService(EmbeddingConfig(batch_size=2)))
    progress: list[tuple[int, int]] = []

    result = await processor.process_document(
        file, "doc-2", stub_client, lambda c, t: progress.append((c, t))
    )

    assert result.metadata.total_chunks == len(result.chunks) == 5
    assert [c.index for c in result.chunks] == list(range(5))
    assert result.metadata.file_type == "Markdown Document"
    expected_avg = round(sum(c.char_count for c in result.chunks) / 5)
    assert result.metadata.avg_chunk_size == expected_avg
    assert progress == [(2, 5), (4, 5), (5, 5)]
    assert len(stub_client.calls) == 3


@pytest.mark.asyncio
async def test_injected_chunker_drives_chunk_size(tmp_path, stub_client):
    chunker = TextChunker(chunk_size=150, overlap=0, min_chunk_size=50, max_chunk_size=600)
    file = _text_file(tmp_path, "notes.txt", "Sentence one. Sentence two. Sentence three.")

    result = await DocumentProcessor(chunker=chunker).process_document(file, "d", stub_client)

    assert result.metadata.chunk_size == 150


# ------------------------------------------------------------------
# generate_embeddings / clean_content / extract_content
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_generate_embeddings_cleans_first(stub_client):
    result = await DocumentProcessor().generate_embeddings(
        "<p>Already   extracted text.</p>", "doc-3", "page.txt", stub_client
    )

    assert result.chunks[0].content == "Already extracted text."
    assert result.metadata.file_name == "page.txt"


@pytest.mark.asyncio
async def test_extract_and_clean_delegate(tmp_path):
    processor = DocumentProcessor()
    file = _text_file(tmp_path, "notes.txt", "Hello   world!!")

    raw = await processor.extract_content(file)

    assert raw == "Hello   world!!"
    assert processor.clean_content(raw) == "Hello world!"


# ------------------------------------------------------------------
# search_documents / embedding config
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_search_documents_ranks_matching_document(tmp_path, make_client):
    client = make_client(vector_for=_fruit_vector)
    processor = DocumentProcessor()
    apples = await processor.process_document(
        _text_file(tmp_path, "apples.txt", "Apple trees need sun."), "a", client
    )
    pears = await processor.process_document(
        _text_file(tmp_path, "pears.txt", "Pear trees need rain."), "p", client
    )

    results = await processor.search_documents(
        "apple", [pears, apples], client, SearchOptions(top_k=5, threshold=0.5)
    )

    assert [r.document_id for r in results] == ["a"]
    assert results[0].score == pytest.approx(1.0)
    assert results[0].file_name == "apples.txt"


def test_set_embedding_config_updates_stats():
    processor = DocumentProcessor()
    processor.set_embedding_config(model="text-embedding-3-large")

    stats = processor.get_embedding_stats()
    assert stats.model == "text-embedding-3-large"
    assert stats.dimensions == 3072
