"""Execution of pending chats against a completion backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Any
from typing import Protocol

from .chat.models import ChatMessage
from .chat.models import ChatSession
from .chat.protocol import ChatParserProtocol
from .context import ResolutionContext
from .io.vault import FileHandle
from .io.vault import VaultProtocol
from .providers.protocol import CompletionClientProtocol
from .providers.protocol import StreamCallback

if TYPE_CHECKING:
    from .resolver import Resolver

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of one chat execution.

    Attributes:
        messages: The chat after execution: the original messages, the
            generated assistant reply, then an empty user message.
        markdown: ``messages`` rendered back to note content.
    """

    messages: list[ChatMessage]
    markdown: str

    @property
    def reply(self) -> ChatMessage | None:
        """The generated message, second to last when the placeholder is present."""
        if len(self.messages) >= 2:
            return self.messages[-2]
        return self.messages[-1] if self.messages else None


class ChatExecutorProtocol(Protocol):
    """Runs a chat note and returns the completed conversation.

    Implementations append an empty user message after the generated
    assistant reply, so the reply is ``messages[-2]``.
    """

    async def execute(
        self,
        file: FileHandle,
        stream_callback: StreamCallback | None = None,
        context: ResolutionContext | None = None,
        *,
        chat: ChatSession | None = None,
    ) -> ExecutionResult:
        """Execute the chat stored in ``file``.

        Args:
            file: Note holding the chat.
            stream_callback: Receives streamed text fragments, if streaming.
            context: Resolution context for links inside the chat's messages.
            chat: Already-parsed chat; read and parsed from ``file`` when omitted.
        """
        ...


class ChatExecutor:
    """Default ChatExecutorProtocol implementation.

    Resolves links in every message (images and audio become media parts
    for user messages), sends one completion request and appends the reply.
    Errors from the backend propagate unchanged; there are no retries.
    """

    def __init__(
        self,
        client: CompletionClientProtocol,
        resolver: Resolver,
        parser: ChatParserProtocol,
        vault: VaultProtocol,
        *,
        default_options: dict[str, Any] | None = None,
    ) -> None:
        self.client = client
        self.resolver = resolver
        self.parser = parser
        self.vault = vault
        self.default_options = default_options or {}

    async def execute(
        self,
        file: FileHandle,
        stream_callback: StreamCallback | None = None,
        context: ResolutionContext | None = None,
        *,
        chat: ChatSession | None = None,
    ) -> ExecutionResult:
        if chat is None:
            chat = self.parser.parse(await self.vault.read(file))
        if context is None:
            context = self.resolver.create_context(file)

        messages = await self.resolver.prepare_messages(chat, file, context)

        request: dict[str, Any] = {**self.default_options, **chat.options}
        request["messages"] = [message.to_payload() for message in messages]
        logger.info(f"Executing chat {file.path} ({len(messages)} messages)")

        reply = await self.client.complete(request, stream_callback)

        completed = chat.model_copy(deep=True)
        completed.append_message("assistant", reply.content)
        completed.append_message("user", "")
        return ExecutionResult(
            messages=completed.messages,
            markdown=self.parser.serialize(completed),
        )
