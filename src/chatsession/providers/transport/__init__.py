from .base import (
    BaseTransport,
    TransportResponse,
)
from .httpx_transport import HttpxTransport

__all__ = [
    "BaseTransport",
    "HttpxTransport",
    "TransportResponse",
]
