"""Detection of chats that are waiting for a reply."""

from __future__ import annotations

from .models import ChatSession


def is_pending_chat(chat: ChatSession) -> bool:
    """True if the chat is a valid chat whose last message is from the user.

    An empty trailing user message still counts: it is the placeholder a
    completed run leaves behind, and the chat is awaiting the next turn.
    """
    if not chat.valid_chat or not chat.messages:
        return False
    return chat.messages[-1].role == "user"
