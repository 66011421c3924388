"""Sentence- and paragraph-aware chunker with word overlap."""

from __future__ import annotations

import re
from collections.abc import Sequence

from docrag.models import EmbeddingChunk

_PARAGRAPH_RE = re.compile(r"\n\s*\n")
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")


class TextChunker:
    """Split cleaned text into overlapping chunks sized for embedding.

    Sentences are accumulated greedily until the buffer would pass
    ``chunk_size`` characters. When a chunk closes, the next buffer is
    seeded with its last ``overlap // avg_word_length`` words. Chunks
    shorter than ``min_chunk_size`` are dropped; a single sentence longer
    than ``max_chunk_size`` is still emitted whole.

    Args:
        chunk_size: Target chunk length in characters.
        overlap: Overlap budget in characters carried into the next chunk.
        min_chunk_size: Chunks below this length are discarded.
        max_chunk_size: Buffer limit; only exceeded to avoid losing content.
        avg_word_length: Characters per word used to turn ``overlap`` into
            a word count.
    """

    def __init__(
        self,
        chunk_size: int = 300,
        overlap: int = 100,
        min_chunk_size: int = 100,
        max_chunk_size: int = 1200,
        avg_word_length: int = 5,
    ) -> None:
        if min_chunk_size < 1:
            raise ValueError("min_chunk_size must be >= 1")
        if not min_chunk_size <= chunk_size <= max_chunk_size:
            raise ValueError("chunk sizes must satisfy min_chunk_size <= chunk_size <= max_chunk_size")
        if overlap < 0:
            raise ValueError("overlap must be >= 0")
        if avg_word_length < 1:
            raise ValueError("avg_word_length must be >= 1")
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.min_chunk_size = min_chunk_size
        self.max_chunk_size = max_chunk_size
        self.avg_word_length = avg_word_length

    @property
    def overlap_words(self) -> int:
        return self.overlap // self.avg_word_length

    def create_semantic_chunks(self, content: str) -> list[str]:
        """Return the ordered chunk texts for *content*.

        Text that is non-empty but too short to fill a single chunk comes back
        as one chunk, so short notes stay searchable.
        """
        chunks: list[str] = []
        paragraphs = _PARAGRAPH_RE.split(content)
        current = ""

        for p_index, paragraph in enumerate(paragraphs):
            sentences = [s for s in _SENTENCE_RE.split(paragraph) if s.strip()]

            for sentence in sentences:
                trimmed = sentence.strip()
                candidate = f"{current} {trimmed}" if current else trimmed

                if len(candidate) > self.chunk_size and len(current) >= self.min_chunk_size:
                    chunks.append(current.strip())
                    seed = self._overlap_tail(current)
                    current = f"{seed} {trimmed}" if seed else trimmed
                elif len(candidate) <= self.max_chunk_size:
                    current = candidate
                elif len(current) >= self.min_chunk_size:
                    chunks.append(current.strip())
                    current = trimmed
                else:
                    # Too small to close: accept an oversized chunk.
                    current = candidate

            if current and p_index < len(paragraphs) - 1:
                current += "\n"

        if current.strip() and len(current) >= self.min_chunk_size:
            chunks.append(current.strip())

        chunks = [c for c in chunks if len(c) >= self.min_chunk_size]
        if not chunks and content.strip():
            return [content.strip()]
        return chunks

    def create_embedding_chunks(
        self, chunks: Sequence[str], embeddings: Sequence[list[float]]
    ) -> list[EmbeddingChunk]:
        """Pair each chunk text with the embedding at the same index.

        Raises:
            IndexError: If there are fewer embeddings than chunks.
        """
        if len(embeddings) < len(chunks):
            raise IndexError(
                f"Got {len(embeddings)} embeddings for {len(chunks)} chunks"
            )
        return [
            EmbeddingChunk(
                content=text,
                index=i,
                embedding=embeddings[i],
                word_count=len(text.split()),
                char_count=len(text),
            )
            for i, text in enumerate(chunks)
        ]

    def _overlap_tail(self, text: str) -> str:
        count = self.overlap_words
        if count <= 0:
            return ""
        words = text.split()
        return " ".join(words[-count:])
