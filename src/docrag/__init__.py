"""docrag — document ingestion and retrieval for RAG chat."""

from docrag.ingest.processor import DocumentProcessor
from docrag.models import (
    DocumentEmbedding,
    DocumentMetadata,
    EmbeddingChunk,
    SearchOptions,
    SearchResult,
)

__all__ = [
    "DocumentEmbedding",
    "DocumentMetadata",
    "DocumentProcessor",
    "EmbeddingChunk",
    "SearchOptions",
    "SearchResult",
]
