from abc import ABC, abstractmethod
from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# Transport Response
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransportResponse:
    """Raw outcome of one HTTP round trip.

    Attributes:
        status_code: HTTP status returned by the server.
        body:        Unparsed response body.
        headers:     Response headers, lower-cased keys.
    """

    status_code: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Abstract Transport
# ---------------------------------------------------------------------------


class BaseTransport(ABC):
    """Interface every HTTP back-end must implement.

    The transport owns connections, TLS and timeouts. It only moves bytes;
    status interpretation and JSON parsing live one layer above in
    ``ChatClient``.
    """

    name: str = "base"

    @abstractmethod
    def post(self, url: str, headers: dict[str, str], body: bytes) -> TransportResponse:
        """POST ``body`` to ``url`` and return the raw response.

        Args:
            url:     Absolute endpoint URL.
            headers: Request headers (``Authorization``, ``Content-Type``).
            body:    Encoded JSON payload.

        Returns:
            A ``TransportResponse``, for any status code.

        Raises:
            CommunicationError: connection refused, I/O error or timeout.
        """
        ...

    def close(self) -> None:
        """Release pooled connections. Default: nothing to release."""
