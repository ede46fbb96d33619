"""Tests for the command-line interface."""

from pathlib import Path

import pytest
from click.testing import CliRunner
from conftest import FakeCompletionClient
from conftest import write_notes

from chatlink import cli as cli_module
from chatlink.cli import cli


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch):
    """Keep the user's global settings out of the tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("CHATLINK_API_KEY", raising=False)
    return home


@pytest.fixture
def fake_client(monkeypatch) -> FakeCompletionClient:
    client = FakeCompletionClient()
    monkeypatch.setattr(cli_module, "OpenAICompatibleClient", lambda endpoint: client)
    return client


class TestResolve:
    def test_prints_resolved_note(self, vault_root: Path) -> None:
        write_notes(vault_root, {"Main.md": "Intro\n[[A]]", "A.md": "alpha"})

        result = CliRunner().invoke(cli, ["resolve", str(vault_root / "Main.md")])

        assert result.exit_code == 0, result.output
        assert "Intro\nalpha" in result.output

    def test_runs_linked_chats(self, vault_root: Path, fake_client: FakeCompletionClient) -> None:
        write_notes(vault_root, {"Main.md": "[[Task]]", "Task.md": "# role: user\nq"})

        result = CliRunner().invoke(cli, ["resolve", str(vault_root / "Main.md"), "--tree"])

        assert result.exit_code == 0, result.output
        assert "answer(q)" in result.output
        assert len(fake_client.requests) == 1

    def test_disable_inlines_raw(self, vault_root: Path, fake_client: FakeCompletionClient) -> None:
        write_notes(vault_root, {"Main.md": "[[Task]]", "Task.md": "# role: user\nq"})

        result = CliRunner().invoke(
            cli, ["resolve", str(vault_root / "Main.md"), "--disable"]
        )

        assert result.exit_code == 0, result.output
        assert "# role: user\nq" in result.output
        assert fake_client.requests == []

    def test_vault_settings_applied(self, vault_root: Path) -> None:
        write_notes(
            vault_root,
            {
                ".chatlink/settings.yaml": "resolution:\n  enabled: false\n",
                "Main.md": "[[A]]",
                "A.md": "[[B]]",
                "B.md": "beta",
            },
        )

        result = CliRunner().invoke(cli, ["resolve", str(vault_root / "Main.md")])

        assert result.exit_code == 0, result.output
        # Disabled resolution inlines one level only
        assert "[[B]]" in result.output

    def test_invalid_config(self, vault_root: Path, tmp_path: Path) -> None:
        write_notes(vault_root, {"Main.md": "text"})
        config = tmp_path / "bad.yaml"
        config.write_text("resolution:\n  max_depth: 0\n")

        result = CliRunner().invoke(
            cli, ["resolve", str(vault_root / "Main.md"), "--config", str(config)]
        )

        assert result.exit_code == 1
        assert "Invalid settings" in result.output

    def test_note_outside_vault(self, vault_root: Path, tmp_path: Path) -> None:
        other = tmp_path / "other"
        write_notes(other, {"Main.md": "text"})

        result = CliRunner().invoke(
            cli, ["resolve", str(other / "Main.md"), "--vault", str(vault_root)]
        )

        assert result.exit_code == 2


class TestRun:
    def test_writes_reply_back(self, vault_root: Path, fake_client: FakeCompletionClient) -> None:
        write_notes(vault_root, {"Chat.md": "# role: user\nhi"})

        result = CliRunner().invoke(cli, ["run", str(vault_root / "Chat.md")])

        assert result.exit_code == 0, result.output
        assert "answer(hi)" in result.output
        assert (vault_root / "Chat.md").read_text(encoding="utf-8") == (
            "# role: user\nhi\n# role: assistant\nanswer(hi)\n# role: user\n"
        )

    def test_rejects_answered_chat(
        self, vault_root: Path, fake_client: FakeCompletionClient
    ) -> None:
        write_notes(vault_root, {"Chat.md": "# role: user\nq\n# role: assistant\na"})

        result = CliRunner().invoke(cli, ["run", str(vault_root / "Chat.md")])

        assert result.exit_code == 1
        assert "not a pending chat" in result.output
        assert fake_client.requests == []

    def test_missing_executor_reported(
        self, vault_root: Path, fake_client: FakeCompletionClient, monkeypatch
    ) -> None:
        write_notes(vault_root, {"Chat.md": "# role: user\nhi"})
        real_create_resolver = cli_module.create_resolver

        def without_executor(*args, **kwargs):
            resolver = real_create_resolver(*args, **kwargs)
            resolver.executor = None
            return resolver

        monkeypatch.setattr(cli_module, "create_resolver", without_executor)

        result = CliRunner().invoke(cli, ["run", str(vault_root / "Chat.md")])

        assert result.exit_code == 1
        assert "No chat executor configured" in result.output
        assert fake_client.requests == []

    def test_backend_error_reported(self, vault_root: Path) -> None:
        write_notes(vault_root, {"Chat.md": "# role: user\nhi"})

        # No API key configured
        result = CliRunner().invoke(cli, ["run", str(vault_root / "Chat.md")])

        assert result.exit_code == 1
        assert "No API key" in result.output
        assert (vault_root / "Chat.md").read_text(encoding="utf-8") == "# role: user\nhi"


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "chatlink" in result.output
