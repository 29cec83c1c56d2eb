from .client import ChatClient
from .config import ClientConfig, get_config, load_config
from .errors import (
    APIError,
    ChatClientError,
    CommunicationError,
    MalformedResponseError,
    SessionStateError,
)
from .models import OpenAIModel

__all__ = [
    "APIError",
    "ChatClient",
    "ChatClientError",
    "ClientConfig",
    "CommunicationError",
    "MalformedResponseError",
    "OpenAIModel",
    "SessionStateError",
    "get_config",
    "load_config",
]
