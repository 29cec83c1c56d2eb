"""Compile-time constants for the chatsession package.

These are values baked into code that change only on code updates,
NOT between environments. For runtime settings, see config.py.
"""

# ──────────────────────────────────────────────────────────────────────
# Chat Completions API
# ──────────────────────────────────────────────────────────────────────
DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_API_KEY_ENV = "OPENAI_API_KEY"
DEFAULT_TIMEOUT = 60.0
CONTENT_TYPE_JSON = "application/json"

# ──────────────────────────────────────────────────────────────────────
# Error body placeholders
# ──────────────────────────────────────────────────────────────────────
UNKNOWN_ERROR_CODE = "unknown code"
UNKNOWN_ERROR_MESSAGE = "unknown error message"

# ──────────────────────────────────────────────────────────────────────
# Token budget
# ──────────────────────────────────────────────────────────────────────
# Rough average for English/Portuguese text. Not the remote tokenizer.
DEFAULT_CHARS_PER_TOKEN = 4
DEFAULT_MAX_TOKENS = 0

# ──────────────────────────────────────────────────────────────────────
# Config
# ──────────────────────────────────────────────────────────────────────
CONFIG_FILENAME = "configs/config.json"
CONFIG_PATH_ENV = "CHATSESSION_CONFIG"
