"""Dense similarity search over stored document embeddings.

The query is embedded with the same embedding service used at ingest, then
compared against every stored chunk vector:

  score(q, c) = dot(q, c) / (|q| * |c|)   clamped to [-1, 1]

Chunks scoring below the threshold are dropped; the rest are ranked
best-first (ties keep document/chunk order) and truncated to ``top_k``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

from docrag.errors import DimensionMismatchError
from docrag.models import DocumentEmbedding, EmbeddingChunk, SearchOptions, SearchResult

if TYPE_CHECKING:
    from docrag.api.client import JsonPoster
    from docrag.ingest.embedding import EmbeddingService

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between *a* and *b*.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        DimensionMismatchError: If the vectors differ in length, which means
            query and stored chunks were embedded with different models.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(
            f"Vector dimensions must match (got {len(a)} and {len(b)})"
        )

    dot = math.fsum(x * y for x, y in zip(a, b))
    mag_a = math.sqrt(math.fsum(x * x for x in a))
    mag_b = math.sqrt(math.fsum(y * y for y in b))

    if mag_a == 0 or mag_b == 0:
        return 0.0

    return max(-1.0, min(1.0, dot / (mag_a * mag_b)))


class SimilaritySearchService:
    """Rank stored chunks against a free-text query."""

    async def search_similar_chunks(
        self,
        query: str,
        document_embeddings: Sequence[DocumentEmbedding],
        api_client: JsonPoster,
        embedding_service: EmbeddingService,
        options: SearchOptions | None = None,
    ) -> list[SearchResult]:
        opts = options or SearchOptions()
        logger.info("Searching for: %r", query)

        query_embedding = await embedding_service.get_embedding(query, api_client)
        ranked = self.rank_chunks(query_embedding, document_embeddings, opts)

        logger.info("Found %d relevant chunks (threshold: %s)", len(ranked), opts.threshold)
        return ranked

    @staticmethod
    def rank_chunks(
        query_embedding: Sequence[float],
        document_embeddings: Sequence[DocumentEmbedding],
        options: SearchOptions,
    ) -> list[SearchResult]:
        """Score, filter, sort and rank chunks against an already-embedded query."""
        scored: list[tuple[float, str, str | None, EmbeddingChunk]] = []
        for doc in document_embeddings:
            file_name = doc.metadata.file_name if options.include_metadata else None
            for chunk in doc.chunks:
                if chunk.embedding is None:
                    continue
                score = cosine_similarity(query_embedding, chunk.embedding)
                if score >= options.threshold:
                    scored.append((score, doc.document_id, file_name, chunk))

        # list.sort is stable: equal scores keep iteration order.
        scored.sort(key=lambda item: item[0], reverse=True)

        return [
            SearchResult(
                chunk=chunk,
                score=score,
                document_id=document_id,
                rank=i + 1,
                file_name=file_name,
            )
            for i, (score, document_id, file_name, chunk) in enumerate(scored[: options.top_k])
        ]
