"""Exceptions raised by the chat client.

    ChatClientError
        ├── CommunicationError      transport failed (I/O, timeout, refused)
        ├── APIError                non-2xx status with an error body
        ├── MalformedResponseError  2xx status but no usable ``choices``
        └── SessionStateError       speculative append/commit protocol misuse
"""

from __future__ import annotations

from chatsession.constants import UNKNOWN_ERROR_CODE, UNKNOWN_ERROR_MESSAGE


class ChatClientError(Exception):
    """Base exception for all chat client errors."""


class CommunicationError(ChatClientError):
    """Raised when the transport could not complete the round trip."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class APIError(ChatClientError):
    """Raised when the API answers with a non-success status."""

    def __init__(
        self,
        status_code: int,
        code: str = UNKNOWN_ERROR_CODE,
        message: str = UNKNOWN_ERROR_MESSAGE,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"API error {status_code} '{code} - {message}'")


class MalformedResponseError(ChatClientError):
    """Raised when a success response lacks the expected ``choices`` structure."""

    def __init__(self, message: str, body: str = "") -> None:
        self.body = body
        super().__init__(message)


class SessionStateError(ChatClientError):
    """Raised when the session history protocol is used out of order."""
