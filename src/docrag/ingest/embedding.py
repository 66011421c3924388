"""Embedding service — batched requests to the remote embeddings endpoint.

What is sent: ``{"texts": [...]}`` to ``/api/embeddings/generate``.
What comes back: ``{"embeddings": [[...], ...]}``, one vector per text, in order.

Batches run strictly one after another; a failed batch aborts the whole run
with no partial result and no retry.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from docrag.api.client import EMBEDDINGS_PATH, JsonPoster
from docrag.api.responses import parse_embeddings_response
from docrag.models import EmbeddingStats

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

# Static model -> vector size table; models not listed use the default.
_MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-large": 3072,
}
_DEFAULT_DIMENSIONS = 1536


@dataclass(frozen=True)
class EmbeddingConfig:
    """Configuration for embedding generation."""

    api_key: str = ""
    model: str = "text-embedding-3-small"
    max_tokens: int = 8000
    batch_size: int = 10

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")


class EmbeddingService:
    """Turn chunk texts into vectors through a ``JsonPoster``.

    The configuration is an immutable value. ``configure()`` swaps in a new
    one; a batch run that is already in flight keeps the configuration it
    started with. Reconfiguring while a run is in progress is still not a
    supported pattern.

    Args:
        config: Initial configuration (defaults to ``EmbeddingConfig()``).
    """

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self._config = config or EmbeddingConfig()

    @property
    def config(self) -> EmbeddingConfig:
        return self._config

    def configure(self, **changes: object) -> EmbeddingConfig:
        """Replace the configuration with a copy that has *changes* applied."""
        self._config = dataclasses.replace(self._config, **changes)
        return self._config

    async def get_embedding(self, text: str, api_client: JsonPoster) -> list[float]:
        """Embed a single text. Transport errors propagate unchanged."""
        logger.debug("Embedding single text: %d chars", len(text))
        response = await api_client.post(EMBEDDINGS_PATH, {"texts": [text]})
        vector = parse_embeddings_response(response, expected=1)[0]
        logger.debug("Received embedding: %d dimensions", len(vector))
        return vector

    async def generate_batch_embeddings(
        self,
        chunks: Sequence[str],
        api_client: JsonPoster,
        on_progress: ProgressCallback | None = None,
    ) -> list[list[float]]:
        """Embed *chunks* in sequential batches, preserving order.

        Args:
            chunks: Texts to embed.
            api_client: Client used for every batch request.
            on_progress: Called as ``on_progress(completed, total)`` after
                each batch; ``completed`` never exceeds ``total``.

        Returns:
            One vector per input text, same order.
        """
        config = self._config
        batch_size = config.batch_size
        total = len(chunks)
        n_batches = math.ceil(total / batch_size)
        embeddings: list[list[float]] = []

        logger.info("Embedding %d chunks in batches of %d", total, batch_size)

        for start in range(0, total, batch_size):
            batch = list(chunks[start : start + batch_size])
            batch_no = start // batch_size + 1
            logger.debug("Processing batch %d/%d", batch_no, n_batches)

            response = await api_client.post(EMBEDDINGS_PATH, {"texts": batch})
            embeddings.extend(parse_embeddings_response(response, expected=len(batch)))

            if on_progress is not None:
                on_progress(min(start + batch_size, total), total)

        logger.info("All batches completed: %d embeddings", len(embeddings))
        return embeddings

    def get_stats(self) -> EmbeddingStats:
        model = self._config.model
        return EmbeddingStats(
            model=model,
            dimensions=_MODEL_DIMENSIONS.get(model, _DEFAULT_DIMENSIONS),
            max_tokens=self._config.max_tokens,
        )
