"""Protocol for mapping link targets to vault files."""

from __future__ import annotations

from typing import Protocol

from chatlink.io.vault import FileHandle


class FileResolverProtocol(Protocol):
    """Protocol for resolving a link target to a file in the vault.

    chatlink provides VaultLinkResolver with Obsidian-style lookup rules.
    Hosts embedding chatlink in another editor supply their own.
    """

    def resolve(self, link_target: str, source_path: str) -> FileHandle | None:
        """Resolve a link target relative to the note containing it.

        Args:
            link_target: Path part of the link, without ``#subpath`` or ``|alias``.
            source_path: Vault path of the note the link appears in.

        Returns:
            Handle of the linked file, or None if nothing matches.
        """
        ...
