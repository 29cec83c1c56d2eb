"""Shared fixtures: a scripted in-memory transport and a client wired to it."""

import json

import pytest

from chatsession.client import ChatClient
from chatsession.errors import CommunicationError
from chatsession.providers.transport.base import BaseTransport, TransportResponse


def ok_body(content: str) -> bytes:
    """Minimal successful chat completion body."""
    return json.dumps(
        {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": "stop",
                }
            ],
        }
    ).encode("utf-8")


def error_body(code: str | None = None, message: str | None = None) -> bytes:
    error: dict = {}
    if code is not None:
        error["code"] = code
    if message is not None:
        error["message"] = message
    return json.dumps({"error": error}).encode("utf-8")


class FakeTransport(BaseTransport):
    """Replays queued responses (or raises queued exceptions) and records requests."""

    name = "fake"

    def __init__(self) -> None:
        self.requests: list[dict] = []
        self._queue: list[TransportResponse | BaseException] = []
        self.closed = False

    def reply(self, content: str) -> "FakeTransport":
        self._queue.append(TransportResponse(200, ok_body(content)))
        return self

    def respond(self, status_code: int, body: bytes) -> "FakeTransport":
        self._queue.append(TransportResponse(status_code, body))
        return self

    def error(self, status_code: int, code=None, message=None) -> "FakeTransport":
        return self.respond(status_code, error_body(code, message))

    def fail(self, exc: BaseException) -> "FakeTransport":
        self._queue.append(exc)
        return self

    def post(self, url, headers, body):
        self.requests.append(
            {"url": url, "headers": dict(headers), "payload": json.loads(body)}
        )
        if not self._queue:
            raise CommunicationError("FakeTransport has no queued response")
        item = self._queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True

    @property
    def last_messages(self) -> list[dict]:
        return self.requests[-1]["payload"]["messages"]


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport):
    return ChatClient("sk-test", transport=transport)
