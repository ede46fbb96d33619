"""I/O utilities for reading and writing vault files."""

from chatlink.io.files import read_bytes_with_retry
from chatlink.io.files import read_with_retry
from chatlink.io.files import write_atomic
from chatlink.io.files import write_with_retry
from chatlink.io.vault import FileHandle
from chatlink.io.vault import LocalVault
from chatlink.io.vault import VaultProtocol
from chatlink.io.vault import normalize_path

from .frontmatter import parse_frontmatter

__all__ = [
    "read_with_retry",
    "read_bytes_with_retry",
    "write_with_retry",
    "write_atomic",
    "parse_frontmatter",
    "FileHandle",
    "LocalVault",
    "VaultProtocol",
    "normalize_path",
]
