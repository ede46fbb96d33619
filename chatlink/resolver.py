"""Recursive resolution of embed links, executing pending chats on the way.

A note linked with ``[[Note]]`` on its own line is replaced by its content.
If the linked note is a pending chat (its last message is from the user),
the chat is executed first and the link is replaced by the generated reply.
Links inside linked notes, and inside the messages of executed chats, are
resolved the same way, so a tree of notes can feed one prompt.

Guarantees per resolution tree (one ResolutionContext):
- A note that links back to one of its ancestors gets a cycle marker.
- Beyond ``max_depth`` notes are returned raw, without resolution.
- Executed results are cached per path when caching is enabled.
- Sibling links resolve concurrently; substitution keeps source order.
- Failures stay inside the note that failed and become an inline marker.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .chat.models import ChatSession
from .chat.models import ResolvedMessage
from .chat.models import Role
from .chat.pending import is_pending_chat
from .chat.protocol import ChatParserProtocol
from .config import ResolutionSettings
from .content import ContentPart
from .content import ResolvedParts
from .content import ResolvedText
from .content import TextPart
from .content import collapse_parts
from .content import merge_text_parts
from .context import ResolutionContext
from .context import create_context
from .events import ResolutionEvent
from .events import ResolutionStatus
from .exceptions import CycleDetectedError
from .exceptions import ExecutionFailure
from .executor import ChatExecutorProtocol
from .hooks import ResolutionEventEmitter
from .io.vault import FileHandle
from .io.vault import VaultProtocol
from .links.parser import EmbedLink
from .links.parser import extract_section
from .links.parser import parse_link_target
from .links.parser import scan_links
from .links.protocol import FileResolverProtocol
from .media.classify import MediaKind
from .media.classify import classify_extension
from .media.classify import encode_audio
from .media.classify import encode_image

logger = logging.getLogger(__name__)


def cycle_marker(path: str) -> str:
    return error_marker(path, CycleDetectedError("Circular dependency", path=path))


def error_marker(path: str, error: BaseException) -> str:
    return f"[[{path}]] (Error: {str(error) or type(error).__name__})"


class Resolver:
    """Resolves embed links in notes, executing pending chats as needed.

    Args:
        settings: Resolution switches and limits.
        vault: Storage for reading notes and writing completed chats.
        file_resolver: Maps link targets to vault files.
        parser: Parses notes into chats.
        executor: Runs pending chats. Set after construction when the
            executor itself needs the resolver (see ``create_resolver``).
        emitter: Receives per-note status events.
    """

    def __init__(
        self,
        settings: ResolutionSettings,
        vault: VaultProtocol,
        file_resolver: FileResolverProtocol,
        parser: ChatParserProtocol,
        executor: ChatExecutorProtocol | None = None,
        emitter: ResolutionEventEmitter | None = None,
    ) -> None:
        self.settings = settings
        self.vault = vault
        self.file_resolver = file_resolver
        self.parser = parser
        self.executor = executor
        self.emitter = emitter or ResolutionEventEmitter()

    def create_context(self, root: FileHandle | str) -> ResolutionContext:
        """Create a fresh context for one top-level resolution request."""
        return create_context(root.path if isinstance(root, FileHandle) else root)

    async def resolve_file(self, file: FileHandle, context: ResolutionContext) -> str:
        """Resolve one note to text.

        Args:
            file: The note to resolve.
            context: Context of the branch that reached this note.

        Returns:
            The note with its links resolved, the generated reply if the
            note is a pending chat, or an inline marker on cycle or failure.
        """
        if not self.settings.enabled:
            return await self.vault.read(file)

        path = file.path

        if context.is_on_branch(path):
            logger.error(f"Circular dependency detected: {path}")
            await self._emit(path, context, ResolutionStatus.CYCLE_DETECTED)
            await self.emitter.notify(
                f"Circular dependency detected: {path}", level="warning", file_path=path
            )
            return cycle_marker(path)

        if context.depth >= self.settings.max_depth:
            logger.warning(f"Max depth ({self.settings.max_depth}) reached at: {path}")
            try:
                return await self.vault.read(file)
            except Exception as e:
                logger.error(f"Error reading {path}: {e}")
                return error_marker(path, e)

        if self.settings.enable_caching and path in context.cache:
            logger.debug(f"Cache hit for: {path}")
            await self._emit(path, context, ResolutionStatus.CACHED)
            return context.cache[path]

        branch = context.descend(path)
        context.enter(path)
        await self._emit(path, context, ResolutionStatus.RESOLVING)

        try:
            content = await self.vault.read(file)
            chat = self.parser.parse(content)
            pending = is_pending_chat(chat)
            await self._emit(
                path,
                context,
                ResolutionStatus.RESOLVING,
                phase="update",
                is_chat_file=chat.valid_chat,
                is_pending_chat=pending,
            )

            if pending:
                resolved = await self._execute_chat(file, chat, branch)
            else:
                logger.debug(f"Not a pending chat: {path}")
                resolved = await self.resolve_links_in_content(content, file, branch)

            await self._emit(
                path,
                context,
                ResolutionStatus.COMPLETE,
                phase="update",
                is_chat_file=chat.valid_chat,
                is_pending_chat=pending,
            )
            return resolved

        except Exception as e:
            logger.error(f"Error resolving file {path}: {e}")
            await self._emit(
                path, context, ResolutionStatus.ERROR, phase="update", error=str(e)
            )
            await self.emitter.notify(
                f"Error resolving {path}: {e}", level="error", file_path=path
            )
            return error_marker(path, e)

        finally:
            context.leave(path)

    async def _execute_chat(
        self, file: FileHandle, chat: ChatSession, branch: ResolutionContext
    ) -> str:
        if self.executor is None:
            raise ExecutionFailure("No chat executor configured", path=file.path)

        logger.info(f"Executing pending chat: {file.path}")
        result = await self.executor.execute(file, None, branch, chat=chat)
        reply = result.reply
        text = reply.content if reply is not None else ""

        if self.settings.enable_caching:
            branch.cache[file.path] = text

        if self.settings.write_intermediate_results and file.path != branch.root:
            await self.vault.write(file, result.markdown)
            logger.info(f"Wrote intermediate result to: {file.path}")

        return text

    async def resolve_links_in_content(
        self, content: str, active_file: FileHandle, context: ResolutionContext
    ) -> str:
        """Replace every whole-line embed link in ``content``.

        All links are resolved concurrently, then substituted at their
        original positions. Links that name no file stay as written.
        """
        links = scan_links(content)
        if not links:
            return content

        resolved = await asyncio.gather(
            *(self._resolve_text_link(link, active_file, context) for link in links)
        )
        return _substitute(content, links, resolved)

    async def _resolve_text_link(
        self, link: EmbedLink, active_file: FileHandle, context: ResolutionContext
    ) -> str:
        target = parse_link_target(link.target)
        file = self.file_resolver.resolve(target.path, active_file.path)
        if file is None:
            logger.debug(f"Unresolved link kept as text: {link.original}")
            return link.original

        # Attachments have no text to inline
        if classify_extension(file.extension) is not MediaKind.OTHER:
            return link.original

        if target.subpath:
            section = await self._read_section(file, target.subpath)
            if section is not None:
                return section

        return await self.resolve_file(file, context)

    async def resolve_files_with_images_and_audio(
        self,
        content: str,
        active_file: FileHandle,
        context: ResolutionContext | None,
        role: Role,
    ) -> ResolvedText | ResolvedParts:
        """Resolve a message body into text or ordered media parts.

        For user messages, linked images become ``image_url`` parts and
        linked audio becomes ``input_audio`` parts. For other roles image and
        audio links stay as written. Every other link is resolved to text.
        Text around links is kept, trimmed, and adjacent text parts are merged.

        Returns:
            ``ResolvedText`` when the result is a single text part (or there
            are no parts at all), otherwise ``ResolvedParts``.
        """
        links = scan_links(content)
        resolved = await asyncio.gather(
            *(self._resolve_media_link(link, active_file, context, role) for link in links)
        )

        parts: list[ContentPart] = []
        last = 0
        for link, part in zip(links, resolved):
            if link.start > last:
                _append_text(parts, content[last : link.start])
            parts.append(part)
            last = link.end
        if last < len(content):
            _append_text(parts, content[last:])

        return collapse_parts(merge_text_parts(parts), content)

    async def _resolve_media_link(
        self,
        link: EmbedLink,
        active_file: FileHandle,
        context: ResolutionContext | None,
        role: Role,
    ) -> ContentPart:
        target = parse_link_target(link.target)
        file = self.file_resolver.resolve(target.path, active_file.path)
        if file is None:
            return TextPart(text=link.original)

        kind = classify_extension(file.extension)
        if kind is MediaKind.OTHER:
            return TextPart(
                text=await self.retrieve_link_content(link.target, active_file, context)
            )
        if role != "user":
            return TextPart(text=link.original)

        try:
            data = await self.vault.read_binary(file)
            if kind is MediaKind.IMAGE:
                return encode_image(data, file.extension)
            return await encode_audio(data, file.extension)
        except Exception as e:
            logger.error(f"Error encoding {file.path}: {e}")
            await self.emitter.notify(
                f"Error encoding {file.path}: {e}", level="error", file_path=file.path
            )
            return TextPart(text=error_marker(file.path, e))

    async def prepare_messages(
        self, chat: ChatSession, active_file: FileHandle, context: ResolutionContext
    ) -> list[ResolvedMessage]:
        """Resolve the links in every message of a chat, concurrently."""
        contents = await asyncio.gather(
            *(
                self.resolve_files_with_images_and_audio(
                    message.content, active_file, context, message.role
                )
                for message in chat.messages
            )
        )
        return [
            ResolvedMessage(role=message.role, content=content)
            for message, content in zip(chat.messages, contents)
        ]

    async def resolve_files(self, markdown: str, active_file: FileHandle) -> str:
        """Resolve all links in ``markdown`` as a new top-level request.

        With resolution disabled, linked notes are inlined as stored.
        """
        if self.settings.enabled:
            context = self.create_context(active_file)
            return await self.resolve_links_in_content(markdown, active_file, context)

        links = scan_links(markdown)
        if not links:
            return markdown

        async def read_static(link: EmbedLink) -> str:
            file = self.file_resolver.resolve(parse_link_target(link.target).path, active_file.path)
            if file is None:
                return link.original
            return await self.vault.read(file)

        resolved = await asyncio.gather(*(read_static(link) for link in links))
        return _substitute(markdown, links, resolved)

    async def retrieve_link_content(
        self,
        link_text: str,
        active_file: FileHandle,
        context: ResolutionContext | None = None,
    ) -> str:
        """Content of one link target, honouring ``#Heading`` subpaths.

        A heading subpath returns that section as stored, without executing
        anything. Otherwise the note is resolved within ``context``, or a
        new context rooted at ``active_file`` when none is given.
        """
        target = parse_link_target(link_text)
        file = self.file_resolver.resolve(target.path, active_file.path)
        if file is None:
            return f"[[{link_text}]]"

        if target.subpath:
            section = await self._read_section(file, target.subpath)
            if section is not None:
                return section

        if not self.settings.enabled:
            return await self.vault.read(file)
        if context is None:
            context = self.create_context(active_file)
        return await self.resolve_file(file, context)

    async def _read_section(self, file: FileHandle, subpath: str) -> str | None:
        text = await self.vault.read(file)
        section = extract_section(text, subpath)
        if section is None:
            logger.debug(f"Section '{subpath}' not found in {file.path}")
        return section

    async def _emit(
        self,
        path: str,
        context: ResolutionContext,
        status: ResolutionStatus,
        phase: str = "start",
        **fields: Any,
    ) -> None:
        await self.emitter.emit_node(
            ResolutionEvent(
                file_path=path,
                parent_path=context.parent,
                depth=context.depth,
                status=status,
                phase=phase,
                **fields,
            )
        )


def _append_text(parts: list[ContentPart], text: str) -> None:
    text = text.strip()
    if text:
        parts.append(TextPart(text=text))


def _substitute(content: str, links: list[EmbedLink], replacements: list[str]) -> str:
    """Put each replacement at its link's span, in source order."""
    pieces = []
    last = 0
    for link, replacement in zip(links, replacements):
        pieces.append(content[last : link.start])
        pieces.append(replacement or "")
        last = link.end
    pieces.append(content[last:])
    return "".join(pieces)
