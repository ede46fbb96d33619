"""Exception hierarchy for chatlink."""

from __future__ import annotations


class ChatlinkError(Exception):
    """Base exception for all chatlink errors."""


class ConfigError(ChatlinkError):
    """Settings file could not be read or failed validation."""


class ResolutionError(ChatlinkError):
    """Base for failures that happen while resolving a linked note.

    Attributes:
        path: Vault path of the note whose resolution failed.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class CycleDetectedError(ResolutionError):
    """A note links back to one of its own ancestors."""


class DepthExceededError(ResolutionError):
    """The resolution tree went deeper than the configured maximum."""


class ExecutionFailure(ResolutionError):
    """A pending chat could not be parsed or executed."""


class LinkUnresolvedError(ResolutionError):
    """A link target does not name any file in the vault."""
