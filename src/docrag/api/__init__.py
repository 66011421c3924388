"""Remote API clients and response parsing."""

from docrag.api.client import EMBEDDINGS_PATH, ApiClient, JsonPoster
from docrag.api.litellm_client import (
    LiteLLMEmbeddingClient,
    MissingApiKeyError,
    validate_api_key,
)
from docrag.api.responses import parse_embeddings_response, parse_extraction_response

__all__ = [
    "EMBEDDINGS_PATH",
    "ApiClient",
    "JsonPoster",
    "LiteLLMEmbeddingClient",
    "MissingApiKeyError",
    "parse_embeddings_response",
    "parse_extraction_response",
    "validate_api_key",
]
