"""Shared fixtures: on-disk vaults and an in-memory completion backend."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from chatlink.config import ChatlinkSettings
from chatlink.config import ResolutionSettings
from chatlink.factory import create_resolver
from chatlink.hooks import ResolutionEventEmitter
from chatlink.providers.protocol import ChatReply
from chatlink.resolver import Resolver


def last_user_text(request: dict[str, Any]) -> str:
    """Text of the last message in a request, flattening media parts."""
    content = request["messages"][-1]["content"]
    if isinstance(content, str):
        return content
    return "\n".join(part["text"] for part in content if part["type"] == "text")


def echo_reply(request: dict[str, Any]) -> str:
    return f"answer({last_user_text(request)})"


class FakeCompletionClient:
    """CompletionClientProtocol double that records every request.

    Args:
        reply: Builds the reply text from the request. Raising fails the call.
        delays: Seconds to sleep before replying, keyed by a substring of the
            last message, to control completion order.
    """

    def __init__(
        self,
        reply: Callable[[dict[str, Any]], str] = echo_reply,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.reply = reply
        self.delays = delays or {}
        self.requests: list[dict[str, Any]] = []
        self.completed: list[str] = []

    async def complete(self, request, stream_callback=None) -> ChatReply:
        self.requests.append(request)
        text = last_user_text(request)
        for marker, delay in self.delays.items():
            if marker in text:
                await asyncio.sleep(delay)
        content = self.reply(request)
        self.completed.append(text)
        return ChatReply(role="assistant", content=content)

    async def __aenter__(self) -> FakeCompletionClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None


def write_notes(root: Path, notes: dict[str, str | bytes]) -> None:
    """Create files under ``root`` from a path -> content mapping."""
    for name, content in notes.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")


def build_resolver(
    vault_root: Path,
    client: FakeCompletionClient | None = None,
    emitter: ResolutionEventEmitter | None = None,
    **resolution: Any,
) -> Resolver:
    settings = ChatlinkSettings(resolution=ResolutionSettings(**resolution))
    return create_resolver(
        settings,
        vault_root,
        client=client or FakeCompletionClient(),
        emitter=emitter or ResolutionEventEmitter(),
    )


@pytest.fixture
def vault_root(tmp_path: Path) -> Path:
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def client() -> FakeCompletionClient:
    return FakeCompletionClient()
