"""Direct-provider embeddings through LiteLLM.

Answers the backend's embeddings route locally so ingestion and search can
run without the chat backend. API key presence is validated before the first
request.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import litellm

from docrag.api.client import EMBEDDINGS_PATH
from docrag.errors import ApiError

logger = logging.getLogger(__name__)

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True

_PROVIDER_ENV: dict[str, str | None] = {
    "openai": "OPENAI_API_KEY",
    "azure": "AZURE_API_KEY",
    "cohere": "COHERE_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "voyage": "VOYAGE_API_KEY",
    "ollama": None,  # Local, no key required
}


class MissingApiKeyError(EnvironmentError):
    """The provider API key environment variable is not set."""


def validate_api_key(provider: str) -> None:
    """Check that the API key env var for *provider* is set.

    Raises:
        MissingApiKeyError: If the required key is missing from environment.
    """
    env_var = _PROVIDER_ENV.get(provider.lower(), f"{provider.upper()}_API_KEY")
    if env_var is None:
        return
    if not os.getenv(env_var):
        raise MissingApiKeyError(
            f"API key not found for provider '{provider}'. "
            f"Set the {env_var} environment variable."
        )


class LiteLLMEmbeddingClient:
    """``post()``-compatible client that embeds through ``litellm.aembedding``.

    Only the embeddings route is served; any other path is a 404 ``ApiError``.

    Args:
        model: Embedding model name without provider prefix.
        provider: LiteLLM provider prefix, e.g. ``openai``.
        num_retries: Passed through to LiteLLM; 0 keeps failures immediate.
    """

    def __init__(self, model: str, provider: str = "openai", num_retries: int = 0) -> None:
        self.model = model
        self.provider = provider
        self.num_retries = num_retries
        self._key_checked = False

    async def post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        if path != EMBEDDINGS_PATH:
            raise ApiError(f"Route not available in direct mode: {path}", status=404)
        if not self._key_checked:
            validate_api_key(self.provider)
            self._key_checked = True

        texts = payload.get("texts") or []
        model = f"{self.provider}/{self.model}"
        logger.debug("litellm.aembedding model=%s texts=%d", model, len(texts))
        response = await litellm.aembedding(
            model=model,
            input=texts,
            num_retries=self.num_retries,
        )
        return {"embeddings": [item["embedding"] for item in response.data]}

    async def aclose(self) -> None:
        """Nothing to release; present for symmetry with ``ApiClient``."""
