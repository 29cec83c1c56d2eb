"""Chat model identifiers documented for the Chat Completions API.

See https://platform.openai.com/docs/models for the current list, or
``GET /v1/models`` to check which ones are enabled for a given key.
"""

from __future__ import annotations

from enum import Enum


class OpenAIModel(str, Enum):
    """Symbolic name → wire string sent as the ``model`` field."""

    # GPT-5.x
    GPT_5_2 = "gpt-5.2"
    GPT_5_1 = "gpt-5.1"
    GPT_5_MINI = "gpt-5-mini"
    GPT_5_NANO = "gpt-5-nano"
    GPT_5 = "gpt-5"

    # GPT-4.1
    GPT_4_1 = "gpt-4.1"
    GPT_4_1_MINI = "gpt-4.1-mini"

    # GPT-4o ("omni")
    GPT_4O = "gpt-4o"
    GPT_4O_MINI = "gpt-4o-mini"

    @property
    def model_name(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


DEFAULT_MODEL = OpenAIModel.GPT_5_MINI


def resolve_model(model: OpenAIModel | str | None) -> str:
    """Return the wire string for an enum member or a literal model name."""
    if model is None:
        return DEFAULT_MODEL.model_name
    if isinstance(model, OpenAIModel):
        return model.model_name
    if not model:
        raise ValueError("Model name must not be empty")
    return model
