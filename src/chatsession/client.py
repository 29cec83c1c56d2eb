"""Chat client: stateful conversations over the stateless Chat Completions API.

The API keeps no state between requests, so every stateful call resends
the whole conversation (system directive + history). This module is the
single place that:
    1. Speculatively records the user message in the session
    2. Trims the session to the token budget (if enabled)
    3. Serializes the session and hands it to the transport
    4. Parses the reply, then commits the pair or rolls the message back

All public methods share one lock per instance, held for the whole
network round trip, so at most one exchange is in flight at a time.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable
from typing import Any

from loguru import logger

from chatsession.config import ClientConfig
from chatsession.constants import (
    CONTENT_TYPE_JSON,
    DEFAULT_API_URL,
    DEFAULT_CHARS_PER_TOKEN,
    UNKNOWN_ERROR_CODE,
    UNKNOWN_ERROR_MESSAGE,
)
from chatsession.errors import (
    APIError,
    ChatClientError,
    CommunicationError,
    MalformedResponseError,
)
from chatsession.models import OpenAIModel, resolve_model
from chatsession.providers.transport import BaseTransport, HttpxTransport, TransportResponse
from chatsession.session.budget import TokenBudgetEnforcer, TokenEstimator
from chatsession.session.messages import Message
from chatsession.session.session import SessionState


class ChatClient:
    """Client for an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_key: str | None,
        model: OpenAIModel | str | None = None,
        *,
        api_url: str = DEFAULT_API_URL,
        transport: BaseTransport | None = None,
        chars_per_token: int = DEFAULT_CHARS_PER_TOKEN,
    ) -> None:
        """
        Args:
            api_key:         Bearer token sent on every request.
            model:           ``OpenAIModel`` member or literal model name
                             (defaults to ``gpt-5-mini``).
            api_url:         Chat completions endpoint.
            transport:       HTTP collaborator; an ``HttpxTransport`` is
                             created (and owned) when omitted.
            chars_per_token: Ratio used by the token estimator.
        """
        if not api_key:
            logger.warning("ChatClient created without an API key")

        self._api_key = api_key or ""
        self._model = resolve_model(model)
        self._api_url = api_url
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport()

        self._lock = threading.Lock()
        self._session = SessionState()
        self._enforcer = TokenBudgetEnforcer(TokenEstimator(chars_per_token))

        self._token_limit_enabled = False
        self._max_tokens = 0

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: BaseTransport | None = None,
    ) -> ChatClient:
        """Build a client from a loaded ``ClientConfig``."""
        client = cls(
            config.api_key,
            config.model,
            api_url=config.api_url,
            transport=transport or HttpxTransport(timeout=config.timeout),
            chars_per_token=config.chars_per_token,
        )
        client._owns_transport = transport is None
        if config.token_limit_enabled:
            client.enable_token_limit(config.max_tokens)
        return client

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def model(self) -> str:
        return self._model

    @property
    def token_limit_enabled(self) -> bool:
        return self._token_limit_enabled

    @property
    def max_tokens(self) -> int:
        return self._max_tokens

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def send_prompt(self, prompt: str) -> str:
        """Send a one-off prompt without reading or touching the history.

        Raises:
            CommunicationError, APIError, MalformedResponseError
        """
        with self._lock:
            data = self._send([Message.user(prompt)])
            return self._extract_assistant_message(data)

    def send_user_message(self, message: str) -> str:
        """Send ``message`` with the full conversation and record the reply.

        Only complete user/assistant pairs stay in the history: on any
        failure, including ``KeyboardInterrupt``, the user message is
        removed again and the exception re-raised.

        Raises:
            CommunicationError, APIError, MalformedResponseError
        """
        with self._lock:
            handle = self._session.append_speculative_user(message)
            try:
                if self._token_limit_enabled:
                    self._enforcer.enforce(self._session, self._max_tokens)

                data = self._send(self._session.snapshot())
                reply = self._extract_assistant_message(data)
            except BaseException as exc:
                # Interrupts too: the lock is released on the way out.
                self._session.rollback(handle)
                logger.warning(
                    "Exchange failed, user message rolled back ({}): {}",
                    type(exc).__name__,
                    exc,
                )
                raise

            self._session.commit_assistant(reply)
            logger.info(
                "Exchange committed | history={} reply_len={}",
                len(self._session),
                len(reply),
            )
            return reply

    def set_system_instructions(self, instructions: str) -> None:
        """Set or replace the system directive sent first on every request."""
        with self._lock:
            self._session.set_system(instructions)

    def get_history(self) -> list[dict[str, str]]:
        """Return system message (if any) + history in wire form, as a copy."""
        with self._lock:
            return self._session.to_wire()

    def restore_history(self, messages: Iterable[dict[str, Any]]) -> None:
        """Load a history previously captured with ``get_history()``.

        Raises:
            SessionStateError: entries are not complete user/assistant pairs.
            ValueError: an entry has an unknown role or non-string content.
        """
        with self._lock:
            self._session.replace_history(list(messages))

    def clear_history(self) -> None:
        """Forget the conversation; the system directive is kept."""
        with self._lock:
            self._session.clear()

    def enable_token_limit(self, max_tokens: int) -> None:
        """Trim the oldest pairs before each request to stay under ``max_tokens``.

        The limit uses estimated tokens (see ``TokenEstimator``).
        """
        if max_tokens <= 0:
            raise ValueError("max_tokens must be positive")
        with self._lock:
            self._token_limit_enabled = True
            self._max_tokens = max_tokens
        logger.debug("Token limit enabled: {}", max_tokens)

    def disable_token_limit(self) -> None:
        with self._lock:
            self._token_limit_enabled = False
        logger.debug("Token limit disabled")

    def estimate_tokens(self) -> int:
        """Estimated token count of the current system message + history."""
        with self._lock:
            return self._enforcer.estimator.estimate(self._session.snapshot())

    def close(self) -> None:
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> ChatClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal: request / response
    # ------------------------------------------------------------------
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": CONTENT_TYPE_JSON,
        }

    def _send(self, messages: list[Message]) -> dict[str, Any]:
        """POST ``messages`` and return the decoded success body."""
        payload = {
            "model": self._model,
            "messages": [m.to_dict() for m in messages],
        }
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")

        logger.debug(
            "Chat request | url={} model={} msgs={}",
            self._api_url,
            self._model,
            len(messages),
        )

        try:
            response = self._transport.post(self._api_url, self._headers(), body)
        except ChatClientError:
            raise
        except Exception as exc:
            logger.error("Chat request to {} failed: {}", self._api_url, exc)
            raise CommunicationError("Error communicating with the chat API", exc) from exc

        if not response.ok:
            raise self._parse_error(response)

        try:
            data = json.loads(response.body)
        except ValueError as exc:
            raise MalformedResponseError(
                f"Chat API returned a non-JSON body: {exc}", response.text[:500]
            ) from exc

        if not isinstance(data, dict):
            raise MalformedResponseError("Chat API returned a non-object body", response.text[:500])
        return data

    @staticmethod
    def _parse_error(response: TransportResponse) -> APIError:
        """Build an ``APIError`` from an error body, with placeholders for gaps."""
        code = UNKNOWN_ERROR_CODE
        message = UNKNOWN_ERROR_MESSAGE

        try:
            data = json.loads(response.body)
        except ValueError:
            data = None

        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict):
            if error.get("code") is not None:
                code = str(error["code"])
            if error.get("message") is not None:
                message = str(error["message"])

        logger.error(
            "Chat API {} | code={} message={}",
            response.status_code,
            code,
            message,
        )
        return APIError(response.status_code, code, message)

    @staticmethod
    def _extract_assistant_message(data: dict[str, Any]) -> str:
        """Return ``choices[0].message.content`` or raise MalformedResponseError."""
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise MalformedResponseError(
                f"Chat API returned no choices: {json.dumps(data)[:500]}",
                json.dumps(data),
            )

        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise MalformedResponseError(
                f"Chat API choice has no message content: {json.dumps(first)[:500]}",
                json.dumps(data),
            )

        logger.debug("Chat response | content_len={}", len(content))
        return content
