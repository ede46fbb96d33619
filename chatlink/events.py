"""
Canonical event names and payloads for link resolution.
Stable surface for observers (tree views, progress displays, logs).
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel
from pydantic import Field

# Per-node status transitions emitted by the resolver
RESOLUTION_NODE = "resolution:node"

# User-facing notices (execution failures, cycles)
USER_NOTIFICATION = "user:notification"

ALL_EVENTS = [
    RESOLUTION_NODE,
    USER_NOTIFICATION,
]


class ResolutionStatus(str, Enum):
    """Status of one note in a resolution tree."""

    IDLE = "idle"
    RESOLVING = "resolving"
    COMPLETE = "complete"
    ERROR = "error"
    CACHED = "cached"
    CYCLE_DETECTED = "cycle-detected"


class ResolutionEvent(BaseModel):
    """Status transition of a single note.

    ``phase`` is ``start`` the first time a note is reached from a given
    parent and ``update`` for every later transition of the same visit.
    """

    file_path: str
    parent_path: str | None = None
    depth: int
    status: ResolutionStatus
    is_pending_chat: bool = False
    is_chat_file: bool | None = None
    error: str | None = None
    phase: Literal["start", "update"] = "start"


class UserNotification(BaseModel):
    """Message meant for the person running the resolution."""

    message: str
    level: Literal["info", "warning", "error"] = "info"
    file_path: str | None = None


class ResolutionNodeData(BaseModel):
    """Accumulated view of one note, folded from its events."""

    path: str
    depth: int
    status: ResolutionStatus = ResolutionStatus.IDLE
    is_pending_chat: bool = False
    is_chat_file: bool | None = None
    children: list[str] = Field(default_factory=list)
    error: str | None = None
