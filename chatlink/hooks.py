"""
Observer registry for resolution events.
Handlers run sequentially by priority; a failing handler never reaches the resolver.
"""

import asyncio
import inspect
import logging
from collections import defaultdict
from collections.abc import Awaitable
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from .events import RESOLUTION_NODE
from .events import USER_NOTIFICATION
from .events import ResolutionEvent
from .events import UserNotification

logger = logging.getLogger(__name__)

EventHandler = Callable[[str, Any], Awaitable[None] | None]


@dataclass
class EventHandlerEntry:
    """Registered handler with priority."""

    handler: EventHandler
    priority: int = 0
    name: str | None = None

    def __lt__(self, other: "EventHandlerEntry") -> bool:
        """Sort by priority (lower number = earlier)."""
        return self.priority < other.priority


class ResolutionEventEmitter:
    """
    Dispatches resolution events to registered observers.

    Observers are informational only: they cannot veto or modify resolution,
    and exceptions raised by them are logged and swallowed.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._handlers: dict[str, list[EventHandlerEntry]] = defaultdict(list)

    def register(
        self,
        event: str,
        handler: EventHandler,
        priority: int = 0,
        name: str | None = None,
    ) -> Callable[[], None]:
        """
        Register a handler for an event.

        Args:
            event: Event name (see events.py)
            handler: Sync or async callable taking (event, payload)
            priority: Execution priority (lower = earlier)
            name: Optional handler name for debugging

        Returns:
            Unregister function
        """
        entry = EventHandlerEntry(
            handler=handler,
            priority=priority,
            name=name or getattr(handler, "__name__", repr(handler)),
        )

        self._handlers[event].append(entry)
        self._handlers[event].sort()

        logger.debug(
            f"Registered handler '{entry.name}' for event '{event}' with priority {priority}"
        )

        def unregister():
            """Remove this handler from the registry."""
            if entry in self._handlers[event]:
                self._handlers[event].remove(entry)
                logger.debug(f"Unregistered handler '{entry.name}' from event '{event}'")

        return unregister

    on = register

    def on_resolution_event(
        self, handler: EventHandler, priority: int = 0
    ) -> Callable[[], None]:
        """Shorthand for ``register(RESOLUTION_NODE, handler)``."""
        return self.register(RESOLUTION_NODE, handler, priority=priority)

    async def emit(self, event: str, payload: BaseModel | dict[str, Any]) -> None:
        """
        Deliver an event to all handlers registered for it.

        Args:
            event: Event name
            payload: Event payload, passed to every handler unchanged
        """
        handlers = self._handlers.get(event, [])
        if not handlers:
            return

        for entry in list(handlers):
            try:
                result = entry.handler(event, payload)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                logger.error(
                    f"CancelledError in handler '{entry.name}' for event '{event}'"
                )
            except Exception as e:
                logger.error(
                    f"Error in handler '{entry.name}' for event '{event}': {e}"
                )

    async def emit_node(self, event: ResolutionEvent) -> None:
        """Emit a per-note status transition."""
        await self.emit(RESOLUTION_NODE, event)

    async def notify(
        self, message: str, level: str = "info", file_path: str | None = None
    ) -> None:
        """Emit a user-facing notice."""
        await self.emit(
            USER_NOTIFICATION,
            UserNotification(message=message, level=level, file_path=file_path),
        )

    def list_handlers(self, event: str | None = None) -> dict[str, list[str]]:
        """
        List registered handlers.

        Args:
            event: Optional event to filter by

        Returns:
            Dict of event names to handler names
        """
        if event:
            handlers = self._handlers.get(event, [])
            return {event: [h.name for h in handlers if h.name is not None]}
        return {
            evt: [h.name for h in handlers if h.name is not None]
            for evt, handlers in self._handlers.items()
        }
