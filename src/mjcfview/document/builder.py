"""Build a scene tree from element events."""

from __future__ import annotations

import logging
from typing import Iterable

from ..core.errors import StructuralError
from ..core.nodes import NodeKind, SceneNode
from ..core.tree import SceneTree
from .reader import ElementEvent, EventType

logger = logging.getLogger(__name__)

# Only allowed at the top of the document
_TOP_LEVEL_ONLY = (NodeKind.WORLDBODY, NodeKind.ASSET)


class TreeBuilder:
    """Consumes element events and grows a ``SceneTree``.

    The builder keeps a stack of open elements. A ``worldbody``, ``default``
    or ``asset`` opened with an empty stack becomes a tree root; any other
    element attaches to the element on top of the stack. Elements without
    children attach and are never pushed. Tags the compiler does not know
    are skipped without touching the stack.

    Example:
        builder = TreeBuilder()
        tree = builder.build(iter_events(Path("scene.xml")))
    """

    def __init__(self, tree: SceneTree | None = None) -> None:
        self.tree = tree if tree is not None else SceneTree()
        # (tag, node id); id is None for elements the tree did not keep
        self._stack: list[tuple[str, int | None]] = []

    def build(self, events: Iterable[ElementEvent]) -> SceneTree:
        """Feed every event and return the finished tree.

        Raises:
            StructuralError: If an element is misplaced or left open
        """
        for event in events:
            self.feed(event)

        if self._stack:
            open_tags = ", ".join(f"<{tag}>" for tag, _ in self._stack)
            raise StructuralError(f"Document ended with open elements: {open_tags}")
        return self.tree

    def feed(self, event: ElementEvent) -> None:
        """Process a single event."""
        kind = NodeKind.from_tag(event.tag)
        if kind is None:
            logger.debug(f"Ignoring unknown element <{event.tag}>")
            return

        if event.type is EventType.END:
            self._close(event)
            return

        node_id = self._open(kind, event)
        if event.type is EventType.START:
            self._stack.append((event.tag, node_id))

    def _open(self, kind: NodeKind, event: ElementEvent) -> int | None:
        node = SceneNode.create(kind, event.attrs)

        if not self._stack and kind in (NodeKind.WORLDBODY, NodeKind.DEFAULT, NodeKind.ASSET):
            return self.tree.set_root(node)

        if kind in _TOP_LEVEL_ONLY:
            raise StructuralError(f"<{event.tag}> must be at the top of the document{_at(event)}")

        if not self._stack:
            raise StructuralError(f"<{event.tag}> has no enclosing element{_at(event)}")

        parent_tag, parent_id = self._stack[-1]
        if parent_id is None:
            logger.debug(f"Dropping <{event.tag}> inside unkept <{parent_tag}>")
            return None

        return self.tree.attach(parent_id, node)

    def _close(self, event: ElementEvent) -> None:
        if not self._stack:
            raise StructuralError(f"Unexpected </{event.tag}>{_at(event)}")

        open_tag, _ = self._stack.pop()
        if open_tag != event.tag:
            raise StructuralError(f"</{event.tag}> closes <{open_tag}>{_at(event)}")


def _at(event: ElementEvent) -> str:
    return f" (line {event.line})" if event.line is not None else ""
