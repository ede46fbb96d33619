"""Protocol for turning note markdown into chats."""

from __future__ import annotations

from typing import Protocol

from .models import ChatSession


class ChatParserProtocol(Protocol):
    """Parses and renders chat notes.

    chatlink provides ChatMarkdownParser for ``# role: ...`` headers.
    """

    def parse(self, markdown: str) -> ChatSession:
        """Parse raw note content into a chat session."""
        ...

    def serialize(self, session: ChatSession) -> str:
        """Render a chat session back to note content."""
        ...
