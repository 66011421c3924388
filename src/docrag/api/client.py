"""Async JSON client for the chat backend (embeddings + extraction routes)."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from docrag.errors import ApiError, MalformedResponseError

logger = logging.getLogger(__name__)

EMBEDDINGS_PATH = "/api/embeddings/generate"
_USER_AGENT = "docrag/0.1"


class JsonPoster(Protocol):
    """Anything that can POST a JSON body and return the decoded JSON reply."""

    async def post(self, path: str, payload: dict[str, Any]) -> Any: ...


class ApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` speaking the backend's JSON contract.

    Non-2xx answers become ``ApiError`` (message taken from the body's
    ``error`` or ``detail`` field when present). Bodies that are not JSON
    become ``MalformedResponseError``. Network failures are ``httpx`` errors
    and propagate unchanged. There is no retry.

    Args:
        base_url: Backend root, e.g. ``http://localhost:8000``.
        api_key: Sent as a bearer token when non-empty.
        timeout: Total request timeout in seconds.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json", "User-Agent": _USER_AGENT}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def post(self, path: str, payload: dict[str, Any]) -> Any:
        """POST *payload* as JSON to *path* and return the decoded body."""
        logger.debug("POST %s%s", self.base_url, path)
        response = await self._client.post(path, json=payload)

        if not response.is_success:
            message, code = _error_details(response)
            logger.info("API error on %s: %s", path, message)
            raise ApiError(message, status=response.status_code, code=code)

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                f"Response from {path} is not valid JSON", status=response.status_code
            ) from exc

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _error_details(response: httpx.Response) -> tuple[str, str | None]:
    fallback = f"HTTP {response.status_code}: {response.reason_phrase}"
    try:
        body = response.json()
    except ValueError:
        return fallback, None
    if not isinstance(body, dict):
        return fallback, None
    message = body.get("error") or body.get("detail") or fallback
    code = body.get("code")
    return str(message), str(code) if code is not None else None
