"""Query-time retrieval over stored document embeddings."""

from docrag.rag.search import SimilaritySearchService, cosine_similarity

__all__ = ["SimilaritySearchService", "cosine_similarity"]
