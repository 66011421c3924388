"""Boundary parsing for remote JSON responses.

Remote payloads are checked once, here, and turned into plain Python values.
Nothing past this module looks at raw response dicts.
"""

from __future__ import annotations

from typing import Any

from docrag.errors import MalformedResponseError


def parse_embeddings_response(payload: Any, expected: int) -> list[list[float]]:
    """Return the vectors from an embeddings response.

    Accepts ``{"embeddings": [[...], ...]}`` and the legacy OpenAI-style
    ``{"data": [{"embedding": [...]}, ...]}``.

    Raises:
        MalformedResponseError: If the shape is wrong or the number of
            vectors differs from *expected*.
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError("Embeddings response is not a JSON object")

    if "embeddings" in payload:
        raw = payload["embeddings"]
    elif isinstance(payload.get("data"), list):
        raw = [item.get("embedding") if isinstance(item, dict) else None for item in payload["data"]]
    else:
        raise MalformedResponseError("Embeddings response has no 'embeddings' field")

    if not isinstance(raw, list):
        raise MalformedResponseError("'embeddings' must be a list")
    if len(raw) != expected:
        raise MalformedResponseError(
            f"Expected {expected} embeddings, got {len(raw)}"
        )

    vectors: list[list[float]] = []
    for i, vec in enumerate(raw):
        if not isinstance(vec, list) or not vec:
            raise MalformedResponseError(f"Embedding {i} is not a non-empty list")
        try:
            vectors.append([float(v) for v in vec])
        except (TypeError, ValueError) as exc:
            raise MalformedResponseError(f"Embedding {i} contains non-numeric values") from exc
    return vectors


def parse_extraction_response(payload: Any) -> str:
    """Return the ``content`` string from a backend extraction response."""
    if not isinstance(payload, dict) or not isinstance(payload.get("content"), str):
        raise MalformedResponseError("No content in extraction response")
    return payload["content"]
