"""Pydantic models for chats stored as markdown notes."""

from __future__ import annotations

from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import Field

from chatlink.content import ResolvedContent

Role = Literal["system", "user", "assistant", "developer", "tool"]


class ChatMessage(BaseModel):
    """One message as written in the note: role plus raw markdown body."""

    role: Role
    content: str = ""


class ResolvedMessage(BaseModel):
    """A message whose links have been resolved, ready for the wire."""

    role: Role
    content: ResolvedContent

    def to_payload(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content.to_payload()}


class ChatSession(BaseModel):
    """A parsed chat note.

    ``valid_chat`` is False when the note had no role headers; its
    ``messages`` are then synthesized from the system prompt and the whole
    note as a single user message.
    """

    messages: list[ChatMessage] = Field(default_factory=list)
    options: dict[str, Any] = Field(default_factory=dict)
    pretext: str = ""
    valid_chat: bool = True

    def append_message(self, role: Role, content: str = "") -> ChatSession:
        self.messages.append(ChatMessage(role=role, content=content))
        return self

    @property
    def last_message(self) -> ChatMessage | None:
        return self.messages[-1] if self.messages else None
