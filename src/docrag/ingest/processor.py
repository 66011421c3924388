"""Document processor — extraction → cleaning → chunking → embedding → assembly.

The processor holds no state between calls: every ``process_document`` run is
independent and safe to repeat. Persisting the result is the caller's job.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from docrag.api.client import JsonPoster
from docrag.errors import EmptyContentError
from docrag.ingest.chunker import TextChunker
from docrag.ingest.cleaner import ContentCleaner
from docrag.ingest.embedding import EmbeddingService, ProgressCallback
from docrag.ingest.extractor import ContentExtractor, SourceFile, file_type_from_name
from docrag.models import (
    DocumentEmbedding,
    DocumentMetadata,
    EmbeddingStats,
    SearchOptions,
    SearchResult,
)
from docrag.rag.search import SimilaritySearchService

logger = logging.getLogger(__name__)


class DocumentProcessor:
    """Orchestrate ingestion and query-time search over injected services.

    Any service not supplied is built with its defaults.
    """

    def __init__(
        self,
        extractor: ContentExtractor | None = None,
        cleaner: ContentCleaner | None = None,
        chunker: TextChunker | None = None,
        embedding_service: EmbeddingService | None = None,
        search_service: SimilaritySearchService | None = None,
    ) -> None:
        self.extractor = extractor or ContentExtractor()
        self.cleaner = cleaner or ContentCleaner()
        self.chunker = chunker or TextChunker()
        self.embedding_service = embedding_service or EmbeddingService()
        self.search_service = search_service or SimilaritySearchService()

    async def extract_content(self, file: SourceFile) -> str:
        return await self.extractor.extract_content(file)

    def clean_content(self, raw: str) -> str:
        return self.cleaner.clean_content(raw)

    async def process_document(
        self,
        file: SourceFile,
        document_id: str,
        api_client: JsonPoster,
        on_progress: ProgressCallback | None = None,
    ) -> DocumentEmbedding:
        """Run the full ingestion pipeline for *file*.

        Raises:
            ExtractionError: If the file cannot be converted to text.
            EmptyContentError: If no chunk survives cleaning and chunking.
            ApiError: If an embedding request fails.
        """
        logger.info("Processing document: %s", file.name)
        raw = await self.extractor.extract_content(file)
        cleaned = self.cleaner.clean_content(raw)
        return await self._embed_content(cleaned, document_id, file.name, api_client, on_progress)

    async def generate_embeddings(
        self,
        content: str,
        document_id: str,
        file_name: str,
        api_client: JsonPoster,
        on_progress: ProgressCallback | None = None,
    ) -> DocumentEmbedding:
        """Same pipeline as ``process_document`` for text that is already extracted."""
        cleaned = self.cleaner.clean_content(content)
        return await self._embed_content(cleaned, document_id, file_name, api_client, on_progress)

    async def search_documents(
        self,
        query: str,
        documents: Sequence[DocumentEmbedding],
        api_client: JsonPoster,
        options: SearchOptions | None = None,
    ) -> list[SearchResult]:
        return await self.search_service.search_similar_chunks(
            query, documents, api_client, self.embedding_service, options
        )

    def set_embedding_config(self, **changes: object) -> None:
        self.embedding_service.configure(**changes)

    def get_embedding_stats(self) -> EmbeddingStats:
        return self.embedding_service.get_stats()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _embed_content(
        self,
        cleaned: str,
        document_id: str,
        file_name: str,
        api_client: JsonPoster,
        on_progress: ProgressCallback | None,
    ) -> DocumentEmbedding:
        chunks = self.chunker.create_semantic_chunks(cleaned)
        logger.info("Created %d semantic chunks", len(chunks))

        if not chunks:
            raise EmptyContentError("No valid chunks created from document content")

        embeddings = await self.embedding_service.generate_batch_embeddings(
            chunks, api_client, on_progress
        )
        embedding_chunks = self.chunker.create_embedding_chunks(chunks, embeddings)

        avg_chunk_size = round(
            sum(c.char_count for c in embedding_chunks) / len(embedding_chunks)
        )
        metadata = DocumentMetadata(
            file_name=file_name,
            file_type=file_type_from_name(file_name),
            total_chunks=len(embedding_chunks),
            chunk_size=self.chunker.chunk_size,
            processed_at=datetime.now(timezone.utc).isoformat(),
            total_characters=len(cleaned),
            avg_chunk_size=avg_chunk_size,
            embedding_model=self.embedding_service.get_stats().model,
        )

        logger.info("Document processed: %s (%d chunks)", file_name, len(embedding_chunks))
        return DocumentEmbedding(document_id=document_id, chunks=embedding_chunks, metadata=metadata)
