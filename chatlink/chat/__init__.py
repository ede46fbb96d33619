"""Chat notes: models, markdown parsing and pending-chat detection."""

from .markdown import CHAT_OPTION_KEYS
from .markdown import DEFAULT_ROLE_FORMATTER
from .markdown import DEFAULT_SYSTEM_PROMPT
from .markdown import ChatMarkdownParser
from .models import ChatMessage
from .models import ChatSession
from .models import ResolvedMessage
from .models import Role
from .pending import is_pending_chat
from .protocol import ChatParserProtocol

__all__ = [
    "CHAT_OPTION_KEYS",
    "DEFAULT_ROLE_FORMATTER",
    "DEFAULT_SYSTEM_PROMPT",
    "ChatMarkdownParser",
    "ChatMessage",
    "ChatSession",
    "ResolvedMessage",
    "Role",
    "is_pending_chat",
    "ChatParserProtocol",
]
