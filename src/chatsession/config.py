"""Runtime configuration loader for chatsession.

Loads an optional JSON config file once, resolves secret references from
environment variables, and exposes a typed dataclass via get_config().

Config file lookup order:
    1. explicit ``path`` argument
    2. ``CHATSESSION_CONFIG`` environment variable
    3. ``configs/config.json`` under the current working directory

A missing file is not an error; defaults apply.

The ``api_key`` entry may name an environment variable instead of holding
the key itself: ``"api_key": "OPENAI_API_KEY"`` reads the key from that
variable (or from ``.env``) when the config is loaded.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from chatsession.constants import (
    CONFIG_FILENAME,
    CONFIG_PATH_ENV,
    DEFAULT_API_KEY_ENV,
    DEFAULT_API_URL,
    DEFAULT_CHARS_PER_TOKEN,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TIMEOUT,
)
from chatsession.models import resolve_model

# Pattern to detect env-var-style values: UPPER_SNAKE_CASE with optional digits
_ENV_VAR_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]{2,}$")


# ──────────────────────────────────────────────────────────────────────
# Secret Resolution
# ──────────────────────────────────────────────────────────────────────


def resolve_secret(value: str) -> str | None:
    """Return the API key named or held by ``value``.

    An all-caps name such as ``OPENAI_API_KEY`` is looked up in the
    environment; any other string is taken as the key itself. An unset
    variable yields None and a warning.
    """
    if not isinstance(value, str) or not value:
        return value

    if _ENV_VAR_PATTERN.match(value):
        resolved = os.environ.get(value)
        if resolved is None:
            logger.warning(
                f"Secret reference '{value}' not found in environment. "
                f"Set it in .env or export it."
            )
        return resolved

    # Literal value (not an env-var reference)
    return value


# ──────────────────────────────────────────────────────────────────────
# Config Dataclass
# ──────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ClientConfig:
    """Settings for one ChatClient."""

    api_key: str | None = None  # Already resolved from env
    api_url: str = DEFAULT_API_URL
    model: str = resolve_model(None)
    timeout: float = DEFAULT_TIMEOUT
    token_limit_enabled: bool = False
    max_tokens: int = DEFAULT_MAX_TOKENS
    chars_per_token: int = DEFAULT_CHARS_PER_TOKEN

    def __post_init__(self) -> None:
        if self.token_limit_enabled and self.max_tokens <= 0:
            raise ValueError("max_tokens must be positive when the token limit is enabled")
        if self.chars_per_token <= 0:
            raise ValueError("chars_per_token must be positive")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")


# ──────────────────────────────────────────────────────────────────────
# Config Loading
# ──────────────────────────────────────────────────────────────────────

_config: ClientConfig | None = None


def _find_config_file(path: str | Path | None) -> Path | None:
    """Return the config file to read, or None when there is none."""
    if path is not None:
        candidate = Path(path).expanduser()
        if not candidate.exists():
            raise FileNotFoundError(f"Config file not found: {candidate}")
        return candidate

    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        candidate = Path(env_path).expanduser()
        if not candidate.exists():
            raise FileNotFoundError(
                f"Config file from {CONFIG_PATH_ENV} not found: {candidate}"
            )
        return candidate

    candidate = Path.cwd() / CONFIG_FILENAME
    return candidate if candidate.exists() else None


def _load_raw_config(config_path: Path | None) -> dict[str, Any]:
    """Load and return the raw config dict (empty when no file)."""
    if config_path is None:
        logger.debug("No config file found, using defaults")
        return {}

    with open(config_path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Config file must hold a JSON object: {config_path}")

    logger.info(f"Loaded config from {config_path}")
    return data


def _parse_config(raw: dict[str, Any]) -> ClientConfig:
    """Parse raw config dict into a typed ClientConfig."""
    client_raw = raw.get("client", raw)
    budget_raw = client_raw.get("token_limit", {})

    return ClientConfig(
        api_key=resolve_secret(client_raw.get("api_key", DEFAULT_API_KEY_ENV)),
        api_url=client_raw.get("api_url", DEFAULT_API_URL),
        model=resolve_model(client_raw.get("model")),
        timeout=float(client_raw.get("timeout", DEFAULT_TIMEOUT)),
        token_limit_enabled=bool(budget_raw.get("enabled", False)),
        max_tokens=int(budget_raw.get("max_tokens", DEFAULT_MAX_TOKENS)),
        chars_per_token=int(budget_raw.get("chars_per_token", DEFAULT_CHARS_PER_TOKEN)),
    )


def load_config(path: str | Path | None = None) -> ClientConfig:
    """Read configuration from disk + environment without caching it."""
    from dotenv import load_dotenv

    load_dotenv()  # populate os.environ from .env

    return _parse_config(_load_raw_config(_find_config_file(path)))


def get_config(*, reload: bool = False) -> ClientConfig:
    """Return the singleton ClientConfig, loading it on first call.

    Args:
        reload: Force re-read from disk (useful for testing).
    """
    global _config

    if _config is None or reload:
        _config = load_config()
        logger.debug(
            f"Config loaded: model={_config.model}, "
            f"token_limit={_config.token_limit_enabled}"
        )

    return _config
