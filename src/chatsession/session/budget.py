"""Heuristic token budget for the conversation history.

The remote tokenizer is not available locally, so the size of a request is
approximated from its serialized JSON: ``len(json) // chars_per_token``.
With the default ratio of 4 characters per token this tracks English and
Portuguese text reasonably well but will not match the server's count
exactly. It only has to bound growth.

When the estimate exceeds the ceiling, whole user/assistant pairs are
evicted oldest first. The system message is never evicted.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from loguru import logger

from chatsession.constants import DEFAULT_CHARS_PER_TOKEN
from chatsession.session.messages import Message
from chatsession.session.session import SessionState


class TokenEstimator:
    """Deterministic size → token approximation."""

    def __init__(self, chars_per_token: int = DEFAULT_CHARS_PER_TOKEN) -> None:
        if chars_per_token <= 0:
            raise ValueError("chars_per_token must be positive")
        self.chars_per_token = chars_per_token

    @staticmethod
    def serialize(messages: Sequence[Message]) -> str:
        return json.dumps(
            [m.to_dict() for m in messages],
            ensure_ascii=False,
            separators=(",", ":"),
        )

    def estimate(self, messages: Sequence[Message]) -> int:
        """Estimated token count of ``messages`` as sent on the wire."""
        return len(self.serialize(messages)) // self.chars_per_token


class TokenBudgetEnforcer:
    """Evicts the oldest pairs until the session fits the ceiling."""

    def __init__(self, estimator: TokenEstimator | None = None) -> None:
        self.estimator = estimator or TokenEstimator()

    def enforce(self, state: SessionState, max_tokens: int) -> int:
        """Trim ``state`` in place and return the number of evicted pairs.

        Stops once under budget or when only one entry/pair is left; the
        request may then still exceed ``max_tokens``, which is accepted
        over sending no context at all.
        """
        evicted = 0
        estimate = self.estimator.estimate(state.snapshot())

        while estimate > max_tokens and state.evict_oldest_pair():
            evicted += 1
            estimate = self.estimator.estimate(state.snapshot())

        if evicted:
            logger.debug(
                "Token budget | evicted {} pair(s), estimate={} max={}",
                evicted,
                estimate,
                max_tokens,
            )
        if estimate > max_tokens:
            logger.warning(
                "Token budget | estimate {} still above {} with {} message(s) left",
                estimate,
                max_tokens,
                len(state),
            )
        return evicted
