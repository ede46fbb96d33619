"""Frontmatter parsing for markdown notes with YAML headers."""

from __future__ import annotations

import re
from typing import Any

import yaml

FRONTMATTER_PATTERN = re.compile(r"^---\s*\n(.*?)\n---\s*(?:\n|$)", re.DOTALL)


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Parse YAML frontmatter from markdown text.

    Args:
        text: Markdown text with optional YAML frontmatter.

    Returns:
        Tuple of (frontmatter_dict, body_text).
        If no frontmatter, returns ({}, original_text).

    Raises:
        yaml.YAMLError: If frontmatter contains invalid YAML.
    """
    match = FRONTMATTER_PATTERN.match(text)
    if not match:
        return {}, text

    frontmatter = yaml.safe_load(match.group(1)) or {}
    if not isinstance(frontmatter, dict):
        return {}, text

    return frontmatter, text[match.end() :]
