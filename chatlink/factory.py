"""Wiring of the default resolver stack for a local vault."""

from __future__ import annotations

from pathlib import Path

from .chat.markdown import ChatMarkdownParser
from .config import ChatlinkSettings
from .executor import ChatExecutor
from .hooks import ResolutionEventEmitter
from .io.vault import LocalVault
from .links.resolver import VaultLinkResolver
from .providers.openai_compat import OpenAICompatibleClient
from .providers.protocol import CompletionClientProtocol
from .resolver import Resolver


def create_resolver(
    settings: ChatlinkSettings,
    vault_root: Path,
    *,
    client: CompletionClientProtocol | None = None,
    emitter: ResolutionEventEmitter | None = None,
) -> Resolver:
    """Build a Resolver over ``vault_root`` with the default collaborators.

    The executor and the resolver reference each other: the resolver runs
    pending chats through the executor, and the executor resolves message
    links through the resolver.

    Args:
        settings: Loaded settings.
        vault_root: Directory holding the notes.
        client: Completion backend; an OpenAICompatibleClient for
            ``settings.endpoint`` when omitted.
        emitter: Event emitter shared with observers.
    """
    vault = LocalVault(vault_root)
    parser = ChatMarkdownParser(
        role_formatter=settings.role_formatter,
        system_prompt=settings.system_prompt,
        use_yaml_frontmatter=settings.use_yaml_frontmatter,
    )
    resolver = Resolver(
        settings=settings.resolution,
        vault=vault,
        file_resolver=VaultLinkResolver(vault),
        parser=parser,
        emitter=emitter,
    )
    resolver.executor = ChatExecutor(
        client=client or OpenAICompatibleClient(settings.endpoint),
        resolver=resolver,
        parser=parser,
        vault=vault,
        default_options={"model": settings.endpoint.model},
    )
    return resolver
