"""Embed link scanning and link target resolution."""

from .parser import EMBED_LINK_PATTERN
from .parser import EmbedLink
from .parser import extract_section
from .parser import LinkTarget
from .parser import parse_link_target
from .parser import scan_links
from .protocol import FileResolverProtocol
from .resolver import VaultLinkResolver

__all__ = [
    "EMBED_LINK_PATTERN",
    "EmbedLink",
    "extract_section",
    "LinkTarget",
    "parse_link_target",
    "scan_links",
    "FileResolverProtocol",
    "VaultLinkResolver",
]
