"""Interactive terminal chat: wires config, logging and a ChatClient together.

Every line typed is sent with the full conversation. Lines starting with
``/`` are commands:

    /system <text>   set or replace the system instructions
    /prompt <text>   one-off prompt that bypasses the history
    /history         print the conversation as JSON
    /tokens          show the estimated token count
    /limit <n>|off   enable or disable the token budget
    /clear           forget the conversation (system instructions kept)
    /quit            exit
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable
from dataclasses import replace

from loguru import logger

from chatsession.client import ChatClient
from chatsession.config import load_config
from chatsession.errors import ChatClientError

PROMPT = "you> "


class Application:
    """Top-level REPL that owns the ChatClient."""

    def __init__(
        self,
        client: ChatClient,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self.client = client
        self._input = input_fn
        self._output = output_fn
        self._running = False

    def handle_line(self, line: str) -> str | None:
        """Process one input line and return the text to display."""
        line = line.strip()
        if not line:
            return None

        if not line.startswith("/"):
            return self.client.send_user_message(line)

        command, _, arg = line[1:].partition(" ")
        arg = arg.strip()

        if command == "quit":
            self._running = False
            return None
        if command == "system":
            if not arg:
                return "Usage: /system <instructions>"
            self.client.set_system_instructions(arg)
            return "System instructions updated."
        if command == "prompt":
            if not arg:
                return "Usage: /prompt <text>"
            return self.client.send_prompt(arg)
        if command == "history":
            return json.dumps(self.client.get_history(), indent=2, ensure_ascii=False)
        if command == "tokens":
            return f"~{self.client.estimate_tokens()} tokens"
        if command == "limit":
            if arg == "off":
                self.client.disable_token_limit()
                return "Token limit disabled."
            if arg.isdigit() and int(arg) > 0:
                self.client.enable_token_limit(int(arg))
                return f"Token limit set to {arg}."
            return "Usage: /limit <max_tokens>|off"
        if command == "clear":
            self.client.clear_history()
            return "Conversation history cleared."

        return f"Unknown command: /{command}"

    def run(self) -> None:
        """Read lines until /quit or EOF."""
        logger.info("chatsession started (model={})", self.client.model)
        self._running = True

        while self._running:
            try:
                line = self._input(PROMPT)
            except (EOFError, KeyboardInterrupt):
                break

            try:
                reply = self.handle_line(line)
            except ChatClientError as exc:
                logger.error("Request failed: {}", exc)
                self._output(f"[error] {exc}")
                continue

            if reply is not None:
                self._output(reply)

        logger.info("chatsession stopped")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="chatsession",
        description="Multi-turn chat against an OpenAI-compatible API",
    )
    parser.add_argument(
        "--config",
        help="Path to a JSON config file (default: configs/config.json)",
    )
    parser.add_argument(
        "--model",
        help="Override the configured model name",
    )
    parser.add_argument(
        "--system",
        help="Initial system instructions",
    )
    parser.add_argument(
        "--max-tokens",
        type=int,
        help="Enable the token budget with this estimated ceiling",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")

    config = load_config(args.config)
    if args.model:
        config = replace(config, model=args.model)

    client = ChatClient.from_config(config)
    if args.max_tokens:
        client.enable_token_limit(args.max_tokens)
    if args.system:
        client.set_system_instructions(args.system)

    with client:
        Application(client).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
