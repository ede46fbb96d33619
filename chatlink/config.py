"""Settings for link resolution and the completion endpoint.

Settings come from YAML files merged by scope, most specific wins:
1. project (``<vault>/.chatlink/settings.yaml``) - per vault
2. global (``~/.chatlink/settings.yaml``) - user defaults

Example::

    resolution:
      max_depth: 8
      write_intermediate_results: true
    endpoint:
      base_url: https://api.openai.com/v1
      model: gpt-4.1-nano
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator
from pydantic import model_validator

from .chat.markdown import DEFAULT_ROLE_FORMATTER
from .chat.markdown import DEFAULT_SYSTEM_PROMPT
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "CHATLINK_API_KEY"
MIN_DEPTH = 1
MAX_DEPTH = 20


class ResolutionSettings(BaseModel):
    """Controls for recursive link resolution."""

    enabled: bool = True
    max_depth: int = Field(default=5, ge=MIN_DEPTH, le=MAX_DEPTH)
    enable_caching: bool = True
    write_intermediate_results: bool = False


class EndpointSettings(BaseModel):
    """An OpenAI-compatible chat-completions endpoint."""

    name: str = "OpenAI"
    base_url: str = "https://api.openai.com/v1"
    api_key: str | None = None
    model: str = "gpt-4.1-nano"
    max_completion_tokens: int = Field(default=4096, gt=0)
    timeout: float = Field(default=300.0, gt=0)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def _api_key_from_env(self) -> EndpointSettings:
        if not self.api_key:
            self.api_key = os.environ.get(API_KEY_ENV_VAR) or None
        return self


class ChatlinkSettings(BaseModel):
    resolution: ResolutionSettings = Field(default_factory=ResolutionSettings)
    endpoint: EndpointSettings = Field(default_factory=EndpointSettings)
    role_formatter: str = DEFAULT_ROLE_FORMATTER
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    use_yaml_frontmatter: bool = False
    debug: bool = False

    @field_validator("role_formatter")
    @classmethod
    def _has_role_placeholder(cls, value: str) -> str:
        if "{role}" not in value:
            raise ValueError("role_formatter must contain '{role}'")
        return value


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    global_settings: Path
    project_settings: Path | None = None

    @classmethod
    def default(cls, vault_root: Path | None = None) -> SettingsPaths:
        return cls(
            global_settings=Path.home() / ".chatlink" / "settings.yaml",
            project_settings=(vault_root / ".chatlink" / "settings.yaml") if vault_root else None,
        )

    def ordered(self) -> list[Path]:
        """Paths from least to most specific."""
        return [p for p in (self.global_settings, self.project_settings) if p is not None]


def deep_merge(parent: dict[str, Any], child: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries; child values win, nested dicts merge."""
    result = parent.copy()
    for key, child_value in child.items():
        parent_value = result.get(key)
        if isinstance(parent_value, dict) and isinstance(child_value, dict):
            result[key] = deep_merge(parent_value, child_value)
        else:
            result[key] = child_value
    return result


def _read_settings_file(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in settings file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e

    if not isinstance(content, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")
    return content


def load_settings(
    paths: SettingsPaths | list[Path] | None = None,
    overrides: dict[str, Any] | None = None,
) -> ChatlinkSettings:
    """Load, merge and validate settings.

    Args:
        paths: Settings files, least specific first. Missing files are skipped.
        overrides: Values applied on top of every file (CLI flags).

    Returns:
        Validated settings.

    Raises:
        ConfigError: If a file is malformed or the merged values are invalid.
    """
    if paths is None:
        paths = SettingsPaths.default()
    ordered = paths.ordered() if isinstance(paths, SettingsPaths) else list(paths)

    merged: dict[str, Any] = {}
    for path in ordered:
        if path.exists():
            logger.debug("Loading settings from %s", path)
            merged = deep_merge(merged, _read_settings_file(path))

    if overrides:
        merged = deep_merge(merged, overrides)

    try:
        return ChatlinkSettings.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
