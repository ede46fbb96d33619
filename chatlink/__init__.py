"""chatlink - recursive [[link]] resolution for markdown chat notes.

Notes embed other notes with whole-line ``[[Note]]`` links. When a linked
note is itself an unanswered chat, chatlink runs it against a completion
endpoint and embeds the generated reply instead, recursively, with cycle
detection, a depth limit and a per-request result cache.

Typical use::

    settings = load_settings(SettingsPaths.default(vault_root))
    resolver = create_resolver(settings, vault_root)
    text = await resolver.resolve_files(markdown, FileHandle("Main.md"))
"""

from __future__ import annotations

__version__ = "0.1.0"

# Chat notes
from chatlink.chat.markdown import ChatMarkdownParser
from chatlink.chat.models import ChatMessage
from chatlink.chat.models import ChatSession
from chatlink.chat.models import ResolvedMessage
from chatlink.chat.pending import is_pending_chat
from chatlink.chat.protocol import ChatParserProtocol

# Settings
from chatlink.config import ChatlinkSettings
from chatlink.config import EndpointSettings
from chatlink.config import ResolutionSettings
from chatlink.config import SettingsPaths
from chatlink.config import load_settings

# Content model
from chatlink.content import ImageUrlPart
from chatlink.content import InputAudioPart
from chatlink.content import ResolvedContent
from chatlink.content import ResolvedParts
from chatlink.content import ResolvedText
from chatlink.content import TextPart

# Resolution core
from chatlink.context import ResolutionContext
from chatlink.context import create_context

# Events
from chatlink.events import RESOLUTION_NODE
from chatlink.events import USER_NOTIFICATION
from chatlink.events import ResolutionEvent
from chatlink.events import ResolutionNodeData
from chatlink.events import ResolutionStatus
from chatlink.events import UserNotification

# Exceptions
from chatlink.exceptions import ChatlinkError
from chatlink.exceptions import ConfigError
from chatlink.exceptions import CycleDetectedError
from chatlink.exceptions import DepthExceededError
from chatlink.exceptions import ExecutionFailure
from chatlink.exceptions import LinkUnresolvedError
from chatlink.exceptions import ResolutionError
from chatlink.executor import ChatExecutor
from chatlink.executor import ChatExecutorProtocol
from chatlink.executor import ExecutionResult
from chatlink.factory import create_resolver
from chatlink.hooks import ResolutionEventEmitter

# Storage and links
from chatlink.io.vault import FileHandle
from chatlink.io.vault import LocalVault
from chatlink.io.vault import VaultProtocol
from chatlink.links.parser import EmbedLink
from chatlink.links.parser import scan_links
from chatlink.links.protocol import FileResolverProtocol
from chatlink.links.resolver import VaultLinkResolver
from chatlink.resolver import Resolver
from chatlink.tree import ResolutionTree

__all__ = [
    "__version__",
    # Chat notes
    "ChatMarkdownParser",
    "ChatMessage",
    "ChatSession",
    "ResolvedMessage",
    "is_pending_chat",
    "ChatParserProtocol",
    # Settings
    "ChatlinkSettings",
    "EndpointSettings",
    "ResolutionSettings",
    "SettingsPaths",
    "load_settings",
    # Content model
    "ImageUrlPart",
    "InputAudioPart",
    "ResolvedContent",
    "ResolvedParts",
    "ResolvedText",
    "TextPart",
    # Resolution core
    "ResolutionContext",
    "create_context",
    "Resolver",
    "create_resolver",
    "ChatExecutor",
    "ChatExecutorProtocol",
    "ExecutionResult",
    # Events
    "RESOLUTION_NODE",
    "USER_NOTIFICATION",
    "ResolutionEvent",
    "ResolutionNodeData",
    "ResolutionStatus",
    "UserNotification",
    "ResolutionEventEmitter",
    "ResolutionTree",
    # Exceptions
    "ChatlinkError",
    "ConfigError",
    "CycleDetectedError",
    "DepthExceededError",
    "ExecutionFailure",
    "LinkUnresolvedError",
    "ResolutionError",
    # Storage and links
    "FileHandle",
    "LocalVault",
    "VaultProtocol",
    "EmbedLink",
    "scan_links",
    "FileResolverProtocol",
    "VaultLinkResolver",
]
