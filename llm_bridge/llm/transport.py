"""Transport clients that deliver formatted requests to a provider."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from llm_bridge.errors import TransportError

_LOGGER = logging.getLogger(__name__)


class TransportClient(Protocol):
    """Sends one request body and returns the decoded provider response."""

    async def send(self, request: dict[str, Any]) -> dict[str, Any]:
        ...


class HttpTransport:
    """JSON-over-HTTP transport for providers with a plain REST endpoint."""

    def __init__(
        self,
        base_url: str,
        path: str,
        api_key: str | None = None,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._path = path
        self._api_key = api_key
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def send(self, request: dict[str, Any]) -> dict[str, Any]:
        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(self._path, headers=self._headers(), json=request)
            except httpx.HTTPError as exc:
                raise TransportError(f"Request to {self._base_url}{self._path} failed: {exc}") from exc

            if response.is_error:
                detail = response.text[:500]
                _LOGGER.warning("Provider returned HTTP %d: %s", response.status_code, detail)
                raise TransportError(
                    f"HTTP {response.status_code} {response.reason_phrase}: {detail}",
                    status_code=response.status_code,
                )
            try:
                return response.json()
            except ValueError as exc:
                raise TransportError(f"Provider returned invalid JSON: {exc}") from exc
