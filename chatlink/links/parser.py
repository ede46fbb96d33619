"""Embed link extraction from note text."""

from __future__ import annotations

import re
from dataclasses import dataclass

# A whole line holding an optional "!" then [[target]]; a trailing \r stays outside the match
EMBED_LINK_PATTERN = re.compile(r"^!?\[\[([^\r\n]*?)\]\](?=\r?$)", re.MULTILINE)


@dataclass(frozen=True)
class EmbedLink:
    """One embed link found in a text.

    Attributes:
        target: Text between the brackets, e.g. ``"Notes/Task1#Summary"``.
        original: The full matched line, kept verbatim for unresolved links.
        start: Offset of the match in the scanned text.
        end: Offset just past the match.
        embedded: True when the line starts with ``!``.
    """

    target: str
    original: str
    start: int
    end: int
    embedded: bool = False


@dataclass(frozen=True)
class LinkTarget:
    """A link target split into its parts: ``path#subpath|alias``."""

    path: str
    subpath: str | None = None
    alias: str | None = None


def scan_links(text: str) -> list[EmbedLink]:
    """Find every line that consists solely of an embed link.

    Args:
        text: Note content.

    Returns:
        Links in source order.
    """
    return [
        EmbedLink(
            target=match.group(1),
            original=match.group(0),
            start=match.start(),
            end=match.end(),
            embedded=match.group(0).startswith("!"),
        )
        for match in EMBED_LINK_PATTERN.finditer(text)
    ]


def parse_link_target(target: str) -> LinkTarget:
    """Split a link target into path, heading subpath and display alias.

    ``"Note#Heading|Shown"`` gives ``LinkTarget("Note", "Heading", "Shown")``.
    Nested headings (``Note#A#B``) keep everything after the first ``#``.
    """
    alias = None
    if "|" in target:
        target, alias = target.split("|", 1)
        alias = alias.strip() or None

    subpath = None
    if "#" in target:
        target, subpath = target.split("#", 1)
        subpath = subpath.strip() or None

    return LinkTarget(path=target.strip(), subpath=subpath, alias=alias)


HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t]*#*[ \t]*$", re.MULTILINE)


def extract_section(text: str, subpath: str) -> str | None:
    """Return the section under a heading, heading line included.

    The section ends at the next heading of the same or a higher level.
    For nested subpaths (``A#B``) only the last heading is matched.

    Returns:
        Stripped section text, or None if no heading matches.
    """
    wanted = subpath.split("#")[-1].strip().lower()
    headings = list(HEADING_PATTERN.finditer(text))
    for index, match in enumerate(headings):
        if match.group(2).strip().lower() != wanted:
            continue
        level = len(match.group(1))
        end = len(text)
        for following in headings[index + 1 :]:
            if len(following.group(1)) <= level:
                end = following.start()
                break
        return text[match.start() : end].strip()
    return None
