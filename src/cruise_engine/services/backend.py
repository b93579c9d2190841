"""Shared plumbing for the cruise backend JSON API."""
from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "cruise-engine/0.1.0",
}


class BackendResponseError(RuntimeError):
    """Raised when the backend answers but reports ``success: false``."""

    def __init__(self, path: str, status: int, body: str) -> None:
        super().__init__(f"Backend request to {path} was not successful ({status})")
        self.path = path
        self.status = status
        self.body = body


class BackendClient(AbstractAsyncContextManager["BackendClient"]):
    """Thin async wrapper around the backend's ``{success, data}`` envelope."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        default_headers = dict(DEFAULT_HEADERS)
        if headers:
            default_headers.update(headers)
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers=default_headers,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aexit__(self, exc_type, exc, exc_tb) -> None:
        await self.aclose()

    async def _get_envelope(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self._base_url}{path}"
        logger.debug("GET %s params=%s", path, params)
        response = await self._client.get(url, params=params)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict) or not payload.get("success"):
            raise BackendResponseError(path, response.status_code, response.text[:512])
        return payload
