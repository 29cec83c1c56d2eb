"""Tests for the interactive Application (client backed by the fake transport)."""

import json

import pytest

from chatsession.app import Application, main


@pytest.fixture
def outputs():
    return []


def _app(client, lines, outputs) -> Application:
    feed = iter(lines)

    def _input(prompt):
        try:
            return next(feed)
        except StopIteration:
            raise EOFError

    return Application(client, input_fn=_input, output_fn=outputs.append)


class TestCommands:
    def test_plain_line_is_a_stateful_exchange(self, client, transport, outputs):
        transport.reply("Hello")
        _app(client, ["Hi"], outputs).run()

        assert outputs == ["Hello"]
        assert len(client.get_history()) == 2

    def test_system_and_history(self, client, outputs):
        _app(client, ["/system Be concise.", "/history"], outputs).run()

        assert outputs[0] == "System instructions updated."
        assert json.loads(outputs[1]) == [{"role": "system", "content": "Be concise."}]

    def test_prompt_bypasses_history(self, client, transport, outputs):
        transport.reply("one-off")
        _app(client, ["/prompt what is 2+2"], outputs).run()

        assert outputs == ["one-off"]
        assert client.get_history() == []

    def test_limit_toggle(self, client, outputs):
        _app(client, ["/limit 50", "/limit off", "/limit nope"], outputs).run()

        assert outputs == [
            "Token limit set to 50.",
            "Token limit disabled.",
            "Usage: /limit <max_tokens>|off",
        ]
        assert not client.token_limit_enabled

    def test_clear(self, client, transport, outputs):
        transport.reply("Hello")
        _app(client, ["Hi", "/clear"], outputs).run()

        assert outputs[-1] == "Conversation history cleared."
        assert client.get_history() == []

    def test_tokens_and_unknown(self, client, outputs):
        _app(client, ["/tokens", "/bogus"], outputs).run()

        assert outputs[0].startswith("~") and outputs[0].endswith(" tokens")
        assert outputs[1] == "Unknown command: /bogus"

    def test_quit_stops_reading(self, client, transport, outputs):
        transport.reply("never")
        _app(client, ["/quit", "Hi"], outputs).run()

        assert outputs == []
        assert transport.requests == []

    def test_api_error_is_reported_and_loop_continues(self, client, transport, outputs):
        transport.error(500, "rate_limited", "slow down").reply("ok")
        _app(client, ["ping", "ping"], outputs).run()

        assert outputs[0].startswith("[error]")
        assert "rate_limited" in outputs[0]
        assert outputs[1] == "ok"
        assert len(client.get_history()) == 2


class TestMain:
    def test_wires_config_into_client(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("CHATSESSION_CONFIG", raising=False)
        monkeypatch.setattr("dotenv.load_dotenv", lambda *a, **kw: False)
        monkeypatch.setenv("OPENAI_API_KEY", "sk-main")

        captured = {}

        def fake_run(self):
            captured["model"] = self.client.model
            captured["limit"] = self.client.max_tokens
            captured["history"] = self.client.get_history()

        monkeypatch.setattr(Application, "run", fake_run)

        assert main(["--model", "gpt-4o", "--max-tokens", "300", "--system", "rules"]) == 0
        assert captured == {
            "model": "gpt-4o",
            "limit": 300,
            "history": [{"role": "system", "content": "rules"}],
        }
