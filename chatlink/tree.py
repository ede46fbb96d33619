"""Fold resolution events into a per-note tree for display."""

from __future__ import annotations

from collections.abc import Callable

from rich.tree import Tree

from .events import ResolutionEvent
from .events import ResolutionNodeData
from .events import ResolutionStatus
from .hooks import ResolutionEventEmitter

STATUS_SYMBOLS = {
    ResolutionStatus.IDLE: "○",
    ResolutionStatus.RESOLVING: "◐",
    ResolutionStatus.COMPLETE: "●",
    ResolutionStatus.ERROR: "✗",
    ResolutionStatus.CACHED: "◉",
    ResolutionStatus.CYCLE_DETECTED: "↻",
}

STATUS_STYLES = {
    ResolutionStatus.IDLE: "dim",
    ResolutionStatus.RESOLVING: "yellow",
    ResolutionStatus.COMPLETE: "green",
    ResolutionStatus.ERROR: "red",
    ResolutionStatus.CACHED: "cyan",
    ResolutionStatus.CYCLE_DETECTED: "magenta",
}


class ResolutionTree:
    """Observer that keeps the latest ResolutionNodeData for every note seen.

    Attach it to an emitter before resolving; read ``nodes`` or call
    ``render()`` afterwards.
    """

    def __init__(self) -> None:
        self.nodes: dict[str, ResolutionNodeData] = {}
        self.roots: list[str] = []
        self._unregister: Callable[[], None] | None = None

    def attach(self, emitter: ResolutionEventEmitter) -> None:
        """Start listening to an emitter's resolution events."""
        self.detach()
        self._unregister = emitter.on_resolution_event(self.handle_event)

    def detach(self) -> None:
        """Stop listening, keeping the data collected so far."""
        if self._unregister is not None:
            self._unregister()
            self._unregister = None

    def handle_event(self, event_name: str, event: ResolutionEvent) -> None:
        """Apply one event to the tree."""
        node = self.nodes.get(event.file_path)
        if node is None:
            node = ResolutionNodeData(path=event.file_path, depth=event.depth)
            self.nodes[event.file_path] = node
            if event.parent_path is None:
                self.roots.append(event.file_path)

        node.status = event.status
        node.is_pending_chat = event.is_pending_chat
        if event.is_chat_file is not None:
            node.is_chat_file = event.is_chat_file
        if event.error:
            node.error = event.error

        if event.parent_path and event.phase == "start":
            parent = self.nodes.get(event.parent_path)
            if parent is not None and event.file_path not in parent.children:
                parent.children.append(event.file_path)

    def clear(self) -> None:
        self.nodes.clear()
        self.roots.clear()

    def render(self, label: str = "Resolution") -> Tree:
        """Build a rich Tree of everything collected so far."""
        tree = Tree(label)
        for root in self.roots:
            self._render_node(tree, root, set())
        return tree

    def _render_node(self, branch: Tree, path: str, seen: set[str]) -> None:
        node = self.nodes[path]
        symbol = STATUS_SYMBOLS[node.status]
        style = STATUS_STYLES[node.status]
        text = f"[{style}]{symbol}[/{style}] {path}"
        if node.is_pending_chat:
            text += " [dim](chat)[/dim]"
        if node.error:
            text += f" [red]{node.error}[/red]"
        child_branch = branch.add(text)

        # Already on this branch: cycle, stop descending
        if path in seen:
            return
        for child in node.children:
            if child in self.nodes:
                self._render_node(child_branch, child, seen | {path})
