"""Command-line interface: resolve or run notes in a local vault."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .chat.pending import is_pending_chat
from .config import ChatlinkSettings
from .config import SettingsPaths
from .config import load_settings
from .events import USER_NOTIFICATION
from .events import UserNotification
from .exceptions import ChatlinkError
from .factory import create_resolver
from .hooks import ResolutionEventEmitter
from .io.vault import FileHandle
from .llm_errors import LLMError
from .providers.openai_compat import OpenAICompatibleClient
from .tree import ResolutionTree

logger = logging.getLogger(__name__)

# Diagnostics go to stderr so stdout stays pipeable markdown
console = Console(stderr=True)

NOTIFICATION_STYLES = {"info": "dim", "warning": "yellow", "error": "red"}


def _configure_logging(verbose: bool, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=debug, rich_tracebacks=debug)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _load(
    vault_root: Path, config_path: Path | None, overrides: dict[str, Any]
) -> ChatlinkSettings:
    paths = SettingsPaths.default(vault_root).ordered()
    if config_path is not None:
        paths.append(config_path)
    try:
        return load_settings(paths, overrides=overrides)
    except ChatlinkError as e:
        raise click.ClickException(str(e)) from e


def _note_handle(note: Path, vault_root: Path) -> FileHandle:
    note = note.resolve()
    if not note.is_relative_to(vault_root):
        raise click.UsageError(f"{note} is not inside the vault {vault_root}")
    return FileHandle(note.relative_to(vault_root).as_posix())


def _print_notification(event: str, notification: UserNotification) -> None:
    style = NOTIFICATION_STYLES.get(notification.level, "dim")
    console.print(f"[{style}]{notification.message}[/{style}]")


def _make_emitter(show_tree: bool) -> tuple[ResolutionEventEmitter, ResolutionTree | None]:
    emitter = ResolutionEventEmitter()
    emitter.register(USER_NOTIFICATION, _print_notification, name="cli-notifications")
    tree = None
    if show_tree:
        tree = ResolutionTree()
        tree.attach(emitter)
    return emitter, tree


vault_option = click.option(
    "--vault",
    "vault_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Vault root (defaults to the note's folder)",
)
config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Extra settings file, applied after global and vault settings",
)
tree_option = click.option(
    "--tree", "show_tree", is_flag=True, help="Print the resolution tree to stderr"
)


@click.group()
@click.version_option(version=__version__, prog_name="chatlink")
@click.option("--verbose", "-v", is_flag=True, help="Log resolution progress")
@click.option("--debug", is_flag=True, help="Log everything, with tracebacks")
def cli(verbose: bool, debug: bool) -> None:
    """chatlink - resolve [[links]] between notes, running pending chats."""
    _configure_logging(verbose, debug)


@cli.command()
@click.argument("note", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@vault_option
@click.option("--max-depth", type=click.IntRange(1, 20), default=None, help="Maximum link depth")
@click.option("--no-cache", is_flag=True, help="Execute repeated chats every time")
@click.option(
    "--write-intermediate", is_flag=True, help="Write completed linked chats back to disk"
)
@click.option("--disable", is_flag=True, help="Inline linked notes as stored, run nothing")
@tree_option
@config_option
def resolve(
    note: Path,
    vault_dir: Path | None,
    max_depth: int | None,
    no_cache: bool,
    write_intermediate: bool,
    disable: bool,
    show_tree: bool,
    config_path: Path | None,
) -> None:
    """Print NOTE with every linked note resolved."""
    vault_root = (vault_dir or note.parent).resolve()
    resolution: dict[str, Any] = {}
    if max_depth is not None:
        resolution["max_depth"] = max_depth
    if no_cache:
        resolution["enable_caching"] = False
    if write_intermediate:
        resolution["write_intermediate_results"] = True
    if disable:
        resolution["enabled"] = False

    settings = _load(vault_root, config_path, {"resolution": resolution} if resolution else {})
    handle = _note_handle(note, vault_root)
    emitter, tree = _make_emitter(show_tree)

    async def _run() -> str:
        async with OpenAICompatibleClient(settings.endpoint) as client:
            resolver = create_resolver(settings, vault_root, client=client, emitter=emitter)
            markdown = await resolver.vault.read(handle)
            return await resolver.resolve_files(markdown, handle)

    result = asyncio.run(_run())
    click.echo(result)
    if tree is not None:
        console.print(tree.render(handle.path))


@cli.command()
@click.argument("note", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@vault_option
@tree_option
@config_option
def run(note: Path, vault_dir: Path | None, show_tree: bool, config_path: Path | None) -> None:
    """Execute NOTE as a chat and write the reply back into it."""
    vault_root = (vault_dir or note.parent).resolve()
    settings = _load(vault_root, config_path, {})
    handle = _note_handle(note, vault_root)
    emitter, tree = _make_emitter(show_tree)

    async def _run() -> str:
        async with OpenAICompatibleClient(settings.endpoint) as client:
            resolver = create_resolver(settings, vault_root, client=client, emitter=emitter)
            chat = resolver.parser.parse(await resolver.vault.read(handle))
            if not is_pending_chat(chat):
                raise click.ClickException(
                    f"{handle.path} is not a pending chat (last message must be from the user)"
                )
            if resolver.executor is None:
                raise click.ClickException("No chat executor configured")
            result = await resolver.executor.execute(
                handle, None, resolver.create_context(handle), chat=chat
            )
            await resolver.vault.write(handle, result.markdown)
            logger.info(f"Wrote completed chat to {handle.path}")
            reply = result.reply
            return reply.content if reply is not None else ""

    try:
        reply = asyncio.run(_run())
    except LLMError as e:
        raise click.ClickException(str(e)) from e

    click.echo(reply)
    if tree is not None:
        console.print(tree.render(handle.path))


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
