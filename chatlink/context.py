"""Per-invocation resolution state."""

from __future__ import annotations

import dataclasses
from collections import Counter
from dataclasses import dataclass
from dataclasses import field


@dataclass
class ResolutionContext:
    """State shared by one top-level resolution call tree.

    ``visited`` and ``cache`` are shared by reference between every branch of
    the tree. ``depth``, ``ancestors`` and ``parent`` belong to one branch:
    each recursive call receives its own view from ``descend`` so siblings
    that finish out of order never corrupt each other's position.

    Attributes:
        root: Vault path of the note that started the resolution.
        depth: Distance of this branch from the root.
        visited: In-flight resolutions per path anywhere in the tree. A path
            reached by two sibling branches at once counts twice and stays
            present until both finish.
        cache: Executed chat results keyed by path, valid for this tree only.
        ancestors: Paths on the call stack of this branch (cycle detection).
        parent: Path of the note that linked to the one being resolved.
    """

    root: str
    depth: int = 0
    visited: Counter[str] = field(default_factory=Counter)
    cache: dict[str, str] = field(default_factory=dict)
    ancestors: frozenset[str] = frozenset()
    parent: str | None = None

    def descend(self, path: str) -> ResolutionContext:
        """Return the view used for links found inside ``path``."""
        return dataclasses.replace(
            self,
            depth=self.depth + 1,
            ancestors=self.ancestors | {path},
            parent=path,
        )

    def is_on_branch(self, path: str) -> bool:
        """True if ``path`` is an ancestor of the current branch."""
        return path in self.ancestors

    def enter(self, path: str) -> None:
        """Mark one more resolution of ``path`` as in flight."""
        self.visited[path] += 1

    def leave(self, path: str) -> None:
        """Finish one resolution of ``path``; the key goes away at zero."""
        self.visited[path] -= 1
        if self.visited[path] <= 0:
            del self.visited[path]


def create_context(root: str) -> ResolutionContext:
    """Create a fresh context for one top-level resolution request."""
    return ResolutionContext(root=root)
