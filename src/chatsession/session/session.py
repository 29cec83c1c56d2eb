"""In-memory session state: one conversation per client instance.

History is a list of :class:`Message` that, between exchanges, holds only
complete user → assistant pairs::

    [user, assistant, user, assistant, ...]

While a request is in flight it may carry one trailing unpaired ``user``
entry (the speculative append), which is either completed by
``commit_assistant`` or removed by ``rollback``.

Not thread-safe on its own; the owning ``ChatClient`` serializes access.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from loguru import logger

from chatsession.errors import SessionStateError
from chatsession.session.messages import Message, Role


class SessionState:
    """Optional system directive plus the ordered message history."""

    def __init__(self) -> None:
        self._system: Message | None = None
        self._history: list[Message] = []
        self._pending: int | None = None  # exchange id of the speculative user entry
        self._last_exchange = 0
        self._checkpoint: list[Message] = []  # history before the speculative append

    # ------------------------------------------------------------------
    # System directive
    # ------------------------------------------------------------------
    @property
    def system_message(self) -> Message | None:
        return self._system

    def set_system(self, content: str) -> None:
        """Replace the system message. Previous directive is discarded."""
        self._system = Message.system(content)
        logger.debug("Session | system message set ({} chars)", len(content))

    def clear_system(self) -> None:
        self._system = None
        logger.debug("Session | system message cleared")

    # ------------------------------------------------------------------
    # Speculative append / commit / rollback
    # ------------------------------------------------------------------
    @property
    def pending(self) -> bool:
        """True while a speculative user entry awaits commit or rollback."""
        return self._pending is not None

    def append_speculative_user(self, content: str) -> int:
        """Append a tentative user message and return its rollback handle.

        The handle is an exchange id, unique for the lifetime of the
        session, so a handle from an earlier exchange never matches.
        """
        if self._pending is not None:
            raise SessionStateError("A speculative user message is already pending")

        self._last_exchange += 1
        self._checkpoint = list(self._history)
        self._history.append(Message.user(content))
        self._pending = self._last_exchange
        logger.trace(
            "Session | speculative user message for exchange {} (total: {})",
            self._pending,
            len(self._history),
        )
        return self._pending

    def commit_assistant(self, content: str) -> None:
        """Complete the pending pair with the assistant reply."""
        if self._pending is None:
            raise SessionStateError("No speculative user message to commit")

        self._history.append(Message.assistant(content))
        self._pending = None
        self._checkpoint = []
        logger.trace("Session | pair committed (total: {})", len(self._history))

    def rollback(self, handle: int) -> None:
        """Drop the speculative user entry of exchange ``handle``.

        History returns to exactly what it was before the append, including
        any pairs evicted by the budget during the failed exchange. No-op
        when that exchange was already committed.
        """
        if self._pending is None or self._pending != handle:
            return

        self._history = self._checkpoint
        self._checkpoint = []
        self._pending = None
        logger.trace("Session | speculative user message rolled back (total: {})", len(self._history))

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def snapshot(self) -> list[Message]:
        """System message (if any) followed by history, as a new list."""
        messages: list[Message] = []
        if self._system is not None:
            messages.append(self._system)
        messages.extend(self._history)
        return messages

    def to_wire(self) -> list[dict[str, str]]:
        return [m.to_dict() for m in self.snapshot()]

    def __len__(self) -> int:
        return len(self._history)

    # ------------------------------------------------------------------
    # Eviction / bulk replacement
    # ------------------------------------------------------------------
    def evict_oldest_pair(self) -> bool:
        """Remove history entries 0 and 1; the system message is exempt.

        Refuses (returns False) when it would leave history empty, so at
        least one pair, or the lone in-flight user message, always survives.
        """
        if len(self._history) <= 2:
            return False

        del self._history[:2]
        logger.debug("Session | evicted oldest pair (remaining: {})", len(self._history))
        return True

    def replace_history(self, messages: Iterable[Message | dict[str, Any]]) -> None:
        """Restore a captured snapshot.

        A leading ``system`` entry becomes the system message. The rest must
        be complete user/assistant pairs; otherwise nothing is changed.
        """
        if self._pending is not None:
            raise SessionStateError("Cannot replace history while an exchange is in flight")

        parsed = [m if isinstance(m, Message) else Message.from_dict(m) for m in messages]

        system: Message | None = None
        if parsed and parsed[0].role is Role.SYSTEM:
            system, parsed = parsed[0], parsed[1:]

        if len(parsed) % 2:
            raise SessionStateError("History must contain complete user/assistant pairs")
        for i, msg in enumerate(parsed):
            expected = Role.USER if i % 2 == 0 else Role.ASSISTANT
            if msg.role is not expected:
                raise SessionStateError(
                    f"Entry {i} has role '{msg.role.value}', expected '{expected.value}'"
                )

        self._system = system
        self._history = parsed
        logger.debug("Session | history replaced ({} messages)", len(parsed))

    def clear(self) -> None:
        """Drop the conversation history; the system message is kept."""
        if self._pending is not None:
            raise SessionStateError("Cannot clear history while an exchange is in flight")
        self._history.clear()
        logger.debug("Session | history cleared")
