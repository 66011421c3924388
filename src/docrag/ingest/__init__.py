"""docrag ingest pipeline — extractor, cleaner, chunker, embedding service, processor."""

from docrag.ingest.chunker import TextChunker
from docrag.ingest.cleaner import ContentCleaner
from docrag.ingest.embedding import EmbeddingConfig, EmbeddingService
from docrag.ingest.extractor import ContentExtractor, SourceFile, file_type_from_name
from docrag.ingest.processor import DocumentProcessor

__all__ = [
    "ContentCleaner",
    "ContentExtractor",
    "DocumentProcessor",
    "EmbeddingConfig",
    "EmbeddingService",
    "SourceFile",
    "TextChunker",
    "file_type_from_name",
]
