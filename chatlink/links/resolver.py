"""Default link resolver for local vaults."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from chatlink.io.vault import FileHandle
from chatlink.io.vault import LocalVault
from chatlink.io.vault import normalize_path

logger = logging.getLogger(__name__)


class VaultLinkResolver:
    """Implementation of FileResolverProtocol for a LocalVault.

    Lookup order:
    - Relative to the folder of the linking note
    - Relative to the vault root
    - Any file in the vault with a matching name (shortest path wins)

    Each step tries the target as written, then with a ``.md`` suffix when
    the target has no extension.
    """

    def __init__(self, vault: LocalVault) -> None:
        self.vault = vault

    def resolve(self, link_target: str, source_path: str) -> FileHandle | None:
        target = normalize_path(link_target)
        if not target:
            return None

        candidates = _with_markdown_suffix(target)
        source_dir = FileHandle(source_path).parent

        for base in (source_dir, ""):
            for candidate in candidates:
                path = normalize_path(f"{base}/{candidate}") if base else candidate
                if self.vault.exists(path):
                    return FileHandle(path)

        # Fall back to a vault-wide name match
        names = {PurePosixPath(candidate).name.lower() for candidate in candidates}
        suffixes = tuple(f"/{candidate}".lower() for candidate in candidates)
        matches = [
            file
            for file in self.vault.list_files()
            if file.name.lower() in names and f"/{file.path}".lower().endswith(suffixes)
        ]
        if not matches:
            logger.debug("No file found for link target %s from %s", link_target, source_path)
            return None

        return min(matches, key=lambda f: (f.path.count("/"), f.path))


def _with_markdown_suffix(target: str) -> list[str]:
    if PurePosixPath(target).suffix:
        return [target, f"{target}.md"]
    return [f"{target}.md", target]
