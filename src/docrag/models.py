"""Domain models for documents, chunks, search results and upload records.

All persisted models serialise to the camelCase JSON shape used by the
storage layer (``to_dict()`` / ``from_dict()``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

UPLOAD_STATUSES = ("processing", "ready", "error")


@dataclass(frozen=True)
class EmbeddingChunk:
    content: str
    index: int
    embedding: list[float] | None
    word_count: int
    char_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "index": self.index,
            "embedding": self.embedding,
            "wordCount": self.word_count,
            "charCount": self.char_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EmbeddingChunk:
        content = str(data.get("content", ""))
        embedding = data.get("embedding")
        return cls(
            content=content,
            index=int(data.get("index", 0)),
            embedding=[float(v) for v in embedding] if embedding is not None else None,
            word_count=int(data.get("wordCount", len(content.split()))),
            char_count=int(data.get("charCount", len(content))),
        )


@dataclass(frozen=True)
class DocumentMetadata:
    """Statistics derived from a single chunking + embedding run."""

    file_name: str
    file_type: str
    total_chunks: int
    chunk_size: int
    processed_at: str
    total_characters: int
    avg_chunk_size: int
    embedding_model: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "fileName": self.file_name,
            "fileType": self.file_type,
            "totalChunks": self.total_chunks,
            "chunkSize": self.chunk_size,
            "processedAt": self.processed_at,
            "totalCharacters": self.total_characters,
            "avgChunkSize": self.avg_chunk_size,
            "embeddingModel": self.embedding_model,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentMetadata:
        return cls(
            file_name=str(data.get("fileName", "")),
            file_type=str(data.get("fileType", "Unknown Document")),
            total_chunks=int(data.get("totalChunks", 0)),
            chunk_size=int(data.get("chunkSize", 0)),
            processed_at=str(data.get("processedAt", "")),
            total_characters=int(data.get("totalCharacters", 0)),
            avg_chunk_size=int(data.get("avgChunkSize", 0)),
            embedding_model=str(data.get("embeddingModel", "")),
        )


@dataclass(frozen=True)
class DocumentEmbedding:
    """All chunks and vectors of one ingested document.

    Immutable once built; re-ingesting a document replaces it wholesale.
    """

    document_id: str
    chunks: list[EmbeddingChunk]
    metadata: DocumentMetadata

    def to_dict(self) -> dict[str, Any]:
        return {
            "documentId": self.document_id,
            "chunks": [c.to_dict() for c in self.chunks],
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentEmbedding:
        return cls(
            document_id=str(data["documentId"]),
            chunks=[EmbeddingChunk.from_dict(c) for c in data.get("chunks", [])],
            metadata=DocumentMetadata.from_dict(data.get("metadata", {})),
        )


@dataclass
class SearchOptions:
    """Query-time knobs for similarity search.

    Attributes:
        top_k: Maximum number of results returned.
        threshold: Minimum cosine similarity for a chunk to be returned.
        include_metadata: Attach the document file name to each result.
    """

    top_k: int = 5
    threshold: float = 0.7
    include_metadata: bool = True

    def __post_init__(self) -> None:
        if self.top_k < 1:
            raise ValueError("top_k must be >= 1")
        if not -1.0 <= self.threshold <= 1.0:
            raise ValueError("threshold must be in [-1.0, 1.0]")


@dataclass
class SearchResult:
    chunk: EmbeddingChunk
    score: float
    document_id: str
    rank: int
    file_name: str | None = None


@dataclass(frozen=True)
class EmbeddingStats:
    model: str
    dimensions: int
    max_tokens: int


@dataclass
class UploadRecord:
    """Small metadata record stored next to every uploaded document."""

    original_file_name: str
    document_id: str
    file_size: int
    mime_type: str
    uploaded_at: str
    status: str = "processing"  # processing | ready | error
    has_embeddings: bool = False
    error: str | None = None

    def __post_init__(self) -> None:
        if self.status not in UPLOAD_STATUSES:
            raise ValueError(f"Unknown upload status {self.status!r}")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "originalFileName": self.original_file_name,
            "documentId": self.document_id,
            "fileSize": self.file_size,
            "mimeType": self.mime_type,
            "uploadedAt": self.uploaded_at,
            "status": self.status,
            "hasEmbeddings": self.has_embeddings,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UploadRecord:
        return cls(
            original_file_name=str(data.get("originalFileName", "")),
            document_id=str(data.get("documentId", "")),
            file_size=int(data.get("fileSize") or 0),
            mime_type=str(data.get("mimeType") or "text/plain"),
            uploaded_at=str(data.get("uploadedAt", "")),
            status=str(data.get("status", "ready")),
            has_embeddings=bool(data.get("hasEmbeddings", False)),
            error=data.get("error"),
        )
