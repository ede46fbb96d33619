"""Vault storage: a directory of notes addressed by vault-relative paths."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from pathlib import PurePosixPath
from typing import Protocol

from .files import read_bytes_with_retry
from .files import read_with_retry
from .files import write_with_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileHandle:
    """A note or attachment inside a vault.

    Attributes:
        path: Vault-relative posix path, e.g. ``"projects/Task1.md"``.
    """

    path: str

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def stem(self) -> str:
        return PurePosixPath(self.path).stem

    @property
    def extension(self) -> str:
        """Lowercase extension without the dot (``""`` when there is none)."""
        return PurePosixPath(self.path).suffix.lstrip(".").lower()

    @property
    def parent(self) -> str:
        """Vault-relative folder, ``""`` for the vault root."""
        parent = str(PurePosixPath(self.path).parent)
        return "" if parent == "." else parent


class VaultProtocol(Protocol):
    """Storage backend the resolver reads notes from and writes results to."""

    async def read(self, file: FileHandle) -> str:
        """Return the text content of a note."""
        ...

    async def read_binary(self, file: FileHandle) -> bytes:
        """Return the raw bytes of an attachment."""
        ...

    async def write(self, file: FileHandle, content: str) -> None:
        """Replace the content of a note."""
        ...

    def exists(self, path: str) -> bool: ...

    def get_file(self, path: str) -> FileHandle | None: ...

    def list_files(self) -> list[FileHandle]: ...


class LocalVault:
    """VaultProtocol over a directory on disk."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def _absolute(self, path: str) -> Path:
        absolute = (self.root / path).resolve()
        if not absolute.is_relative_to(self.root):
            raise ValueError(f"Path escapes vault root: {path}")
        return absolute

    async def read(self, file: FileHandle) -> str:
        return await read_with_retry(self._absolute(file.path))

    async def read_binary(self, file: FileHandle) -> bytes:
        return await read_bytes_with_retry(self._absolute(file.path))

    async def write(self, file: FileHandle, content: str) -> None:
        logger.debug(f"Writing {file.path}")
        await write_with_retry(self._absolute(file.path), content)

    def exists(self, path: str) -> bool:
        try:
            return self._absolute(path).is_file()
        except ValueError:
            return False

    def get_file(self, path: str) -> FileHandle | None:
        """Return a handle for ``path`` if it names an existing file."""
        normalized = normalize_path(path)
        if not normalized or not self.exists(normalized):
            return None
        return FileHandle(normalized)

    def handle_for(self, path: Path) -> FileHandle:
        """Build a handle from a filesystem path inside the vault."""
        absolute = Path(path).resolve()
        return FileHandle(absolute.relative_to(self.root).as_posix())

    def list_files(self) -> list[FileHandle]:
        """All files in the vault, hidden folders excluded, sorted by path."""
        files = []
        for candidate in self.root.rglob("*"):
            relative = candidate.relative_to(self.root)
            if any(part.startswith(".") for part in relative.parts):
                continue
            if candidate.is_file():
                files.append(FileHandle(relative.as_posix()))
        return sorted(files, key=lambda f: f.path)


def normalize_path(path: str) -> str:
    """Normalize a vault path: forward slashes, no leading slash, no ``.`` parts."""
    parts = [p for p in path.replace("\\", "/").split("/") if p and p != "."]
    return "/".join(parts)
