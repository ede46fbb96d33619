"""Tests for ChatExecutor."""

from pathlib import Path

import pytest
from conftest import FakeCompletionClient
from conftest import build_resolver
from conftest import write_notes

from chatlink.chat.models import ChatMessage
from chatlink.executor import ExecutionResult
from chatlink.io.vault import FileHandle
from chatlink.llm_errors import RateLimitError


class TestExecute:
    @pytest.mark.asyncio
    async def test_appends_reply_and_empty_user_message(
        self, vault_root: Path, client: FakeCompletionClient
    ) -> None:
        write_notes(vault_root, {"Chat.md": "# role: user\nhello"})
        resolver = build_resolver(vault_root, client)

        result = await resolver.executor.execute(FileHandle("Chat.md"))

        assert [m.role for m in result.messages] == ["user", "assistant", "user"]
        assert result.reply == ChatMessage(role="assistant", content="answer(hello)")
        assert result.messages[-1].content == ""
        assert result.markdown == (
            "# role: user\nhello\n# role: assistant\nanswer(hello)\n# role: user\n"
        )

    @pytest.mark.asyncio
    async def test_links_in_messages_are_resolved(
        self, vault_root: Path, client: FakeCompletionClient
    ) -> None:
        write_notes(
            vault_root,
            {"Chat.md": "# role: user\nSee\n[[Ctx]]", "Ctx.md": "context"},
        )
        resolver = build_resolver(vault_root, client)

        result = await resolver.executor.execute(FileHandle("Chat.md"))

        assert client.requests[0]["messages"] == [{"role": "user", "content": "See\ncontext"}]
        # The stored chat keeps the link, not the resolved text
        assert result.messages[0].content == "See\n[[Ctx]]"

    @pytest.mark.asyncio
    async def test_options_merge_over_defaults(
        self, vault_root: Path, client: FakeCompletionClient
    ) -> None:
        note = '```json\n{"temperature": 0.2}\n```\n# role: user\nq'
        write_notes(vault_root, {"Chat.md": note})
        resolver = build_resolver(vault_root, client)

        result = await resolver.executor.execute(FileHandle("Chat.md"))

        request = client.requests[0]
        assert request["model"] == "gpt-4.1-nano"
        assert request["temperature"] == 0.2
        assert result.markdown.startswith('```json\n{\n  "temperature": 0.2\n}\n```\n# role: user')

    @pytest.mark.asyncio
    async def test_prepared_chat_is_not_reread(
        self, vault_root: Path, client: FakeCompletionClient
    ) -> None:
        write_notes(vault_root, {"Chat.md": "# role: user\nstored"})
        resolver = build_resolver(vault_root, client)
        chat = resolver.parser.parse("# role: user\ngiven")

        result = await resolver.executor.execute(FileHandle("Chat.md"), chat=chat)

        assert result.reply.content == "answer(given)"
        # Input chat is left untouched
        assert len(chat.messages) == 1

    @pytest.mark.asyncio
    async def test_backend_errors_propagate(self, vault_root: Path) -> None:
        def fail(request):
            raise RateLimitError("API Error (429): slow down", status_code=429)

        write_notes(vault_root, {"Chat.md": "# role: user\nq"})
        resolver = build_resolver(vault_root, FakeCompletionClient(reply=fail))

        with pytest.raises(RateLimitError):
            await resolver.executor.execute(FileHandle("Chat.md"))


class TestExecutionResult:
    def test_reply_is_second_to_last(self) -> None:
        result = ExecutionResult(
            messages=[
                ChatMessage(role="user", content="q"),
                ChatMessage(role="assistant", content="a"),
                ChatMessage(role="user", content=""),
            ],
            markdown="",
        )
        assert result.reply.content == "a"

    def test_reply_with_short_history(self) -> None:
        single = ExecutionResult(messages=[ChatMessage(role="assistant", content="a")], markdown="")
        assert single.reply.content == "a"
        assert ExecutionResult(messages=[], markdown="").reply is None
