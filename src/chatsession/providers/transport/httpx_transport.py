"""Synchronous httpx transport for OpenAI-compatible endpoints.

Wraps a single ``httpx.Client`` so connections are pooled across the
exchanges of one chat client. Any ``httpx.HTTPError`` (connect failure,
read timeout, protocol error) is re-raised as ``CommunicationError``.
"""

from __future__ import annotations

import httpx
from loguru import logger

from chatsession.constants import DEFAULT_TIMEOUT
from chatsession.errors import CommunicationError
from chatsession.providers.transport.base import BaseTransport, TransportResponse


class HttpxTransport(BaseTransport):
    """Transport that POSTs through a pooled ``httpx.Client``."""

    name: str = "httpx"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Args:
            timeout: Per-request timeout in seconds; ignored if ``client`` is given.
            client:  Pre-built client (e.g. with ``httpx.MockTransport`` in tests).
        """
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def post(self, url: str, headers: dict[str, str], body: bytes) -> TransportResponse:
        logger.debug("HTTP POST | url={} bytes={}", url, len(body))

        try:
            response = self._client.post(url, headers=headers, content=body)
        except httpx.HTTPError as exc:
            logger.error("HTTP POST to {} failed: {}", url, exc)
            raise CommunicationError("Error communicating with the chat API", exc) from exc

        logger.debug(
            "HTTP POST | status={} bytes={}",
            response.status_code,
            len(response.content),
        )
        return TransportResponse(
            status_code=response.status_code,
            body=response.content,
            headers={k.lower(): v for k, v in response.headers.items()},
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
