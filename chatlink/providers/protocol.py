"""Protocol for completion backends."""

from __future__ import annotations

from collections.abc import Awaitable
from collections.abc import Callable
from typing import Any
from typing import Protocol

from pydantic import BaseModel

# Receives each streamed text fragment as it arrives
StreamCallback = Callable[[str], Awaitable[None] | None]


class ChatReply(BaseModel):
    """The message a completion backend generated."""

    role: str = "assistant"
    content: str = ""


class CompletionClientProtocol(Protocol):
    """Sends one chat-completions request and returns the generated message."""

    async def complete(
        self,
        request: dict[str, Any],
        stream_callback: StreamCallback | None = None,
    ) -> ChatReply:
        """Run a completion.

        Args:
            request: Chat-completions body (``model``, ``messages`` and options).
            stream_callback: When given and the request asks for streaming,
                called with every text delta.

        Returns:
            The generated reply.

        Raises:
            LLMError: On any transport, HTTP or response-shape failure.
        """
        ...
