"""Markdown <-> ChatSession conversion.

A chat note looks like::

    ```json
    {"model": "gpt-4.1-nano"}
    ```
    # role: system
    Be brief.
    # role: user
    Summarize [[Meeting notes]].

Everything before the first role header is the pretext. Chat options come
from a fenced ``json`` block or YAML frontmatter in the pretext.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import yaml

from chatlink.io.frontmatter import parse_frontmatter

from .models import ChatSession
from .models import Role

logger = logging.getLogger(__name__)

DEFAULT_ROLE_FORMATTER = "# role: {role}"
DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant. Respond using Markdown."

# Keys accepted from a note's option block; anything else is ignored
CHAT_OPTION_KEYS = (
    "model",
    "stream",
    "max_completion_tokens",
    "temperature",
    "top_p",
    "n",
    "stop",
    "logit_bias",
    "metadata",
    "modalities",
    "tool_choice",
    "tools",
    "web_search_options",
)

VALID_ROLES = {"system", "user", "assistant", "developer", "tool"}


def _code_block_pattern(language: str) -> re.Pattern[str]:
    return re.compile(rf"```{language}\n([\s\S]*?)\n```", re.IGNORECASE)


def extract_code_block(markdown: str, language: str) -> str | None:
    """Return the body of the first fenced block in ``language``, if any."""
    match = _code_block_pattern(language).search(markdown)
    return match.group(1) if match else None


def replace_code_block(text: str, language: str, new_text: str) -> str:
    """Replace the first fenced block in ``language``, appending one if missing."""
    pattern = _code_block_pattern(language)
    block = f"```{language}\n{new_text}\n```"
    if not pattern.search(text):
        return f"{text}\n{block}" if text else block
    return pattern.sub(lambda _: block, text, count=1)


def filter_options(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        return {}
    return {key: raw[key] for key in CHAT_OPTION_KEYS if key in raw}


class ChatMarkdownParser:
    """Implementation of ChatParserProtocol for role-header markdown."""

    def __init__(
        self,
        role_formatter: str = DEFAULT_ROLE_FORMATTER,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        use_yaml_frontmatter: bool = False,
    ) -> None:
        if "{role}" not in role_formatter:
            raise ValueError(f"Role formatter must contain '{{role}}': {role_formatter!r}")
        self.role_formatter = role_formatter
        self.system_prompt = system_prompt
        self.use_yaml_frontmatter = use_yaml_frontmatter

        prefix, suffix = role_formatter.split("{role}", 1)
        self._role_pattern = re.compile(
            rf"^{re.escape(prefix)}(\w+){re.escape(suffix)}$", re.MULTILINE
        )

    def format_role(self, role: str) -> str:
        return self.role_formatter.replace("{role}", role)

    def parse(self, markdown: str) -> ChatSession:
        """Parse a note into a ChatSession.

        Args:
            markdown: Raw note content.

        Returns:
            The parsed session. Notes without role headers come back with
            ``valid_chat=False``.
        """
        text = f"\n{markdown.strip()}\n"
        matches = [
            m for m in self._role_pattern.finditer(text) if m.group(1).lower() in VALID_ROLES
        ]

        if not matches:
            session = ChatSession(valid_chat=False)
            session.append_message("system", self.system_prompt)
            session.append_message("user", text.strip())
            return session

        session = ChatSession(pretext=text[: matches[0].start()].strip())
        for index, match in enumerate(matches):
            content_end = matches[index + 1].start() if index + 1 < len(matches) else len(text)
            role: Role = match.group(1).lower()  # type: ignore[assignment]
            session.append_message(role, text[match.end() : content_end].strip())

        session.options = self._parse_options(session.pretext)
        return session

    def serialize(self, session: ChatSession) -> str:
        """Render a session back to markdown."""
        pretext = session.pretext
        if session.options:
            if self.use_yaml_frontmatter:
                _, body = parse_frontmatter(_code_block_pattern("json").sub("", pretext))
                dumped = yaml.safe_dump(session.options, sort_keys=False, allow_unicode=True)
                pretext = f"---\n{dumped.strip()}\n---\n{body.strip()}"
            else:
                pretext = replace_code_block(
                    pretext, "json", json.dumps(session.options, indent=2)
                )

        chat_text = "\n".join(
            f"{self.format_role(message.role)}\n{message.content}" for message in session.messages
        )
        pretext = pretext.strip()
        return f"{pretext}\n{chat_text}" if pretext else chat_text

    def _parse_options(self, pretext: str) -> dict[str, Any]:
        options_str = extract_code_block(pretext, "json")
        if options_str is not None:
            try:
                return filter_options(json.loads(options_str))
            except json.JSONDecodeError:
                logger.debug("Ignoring malformed json options block")
                return {}

        try:
            frontmatter, _ = parse_frontmatter(pretext)
        except yaml.YAMLError as e:
            logger.warning(f"Error parsing frontmatter YAML: {e}")
            return {}
        return filter_options(frontmatter)
