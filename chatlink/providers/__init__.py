"""Completion backends."""

from .openai_compat import OpenAICompatibleClient
from .protocol import ChatReply
from .protocol import CompletionClientProtocol
from .protocol import StreamCallback

__all__ = [
    "OpenAICompatibleClient",
    "ChatReply",
    "CompletionClientProtocol",
    "StreamCallback",
]
