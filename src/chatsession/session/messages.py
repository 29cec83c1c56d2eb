# conversation messages

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """One entry of the conversation, immutable once created.

    Attributes:
        role:    ``system``, ``user`` or ``assistant``.
        content: Text payload.
    """

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        """Wire form expected by the Chat Completions ``messages`` list."""
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        """Build a Message from its wire form.

        Raises:
            ValueError: not a mapping, unknown role or non-string content.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Message must be a dict, got {type(data).__name__}")
        role = Role(data.get("role"))
        content = data.get("content")
        if not isinstance(content, str):
            raise ValueError(f"Message content must be a string, got {type(content).__name__}")
        return cls(role=role, content=content)

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str) -> Message:
        return cls(Role.ASSISTANT, content)
