"""Arena holding the scene tree.

Nodes are stored in one list and addressed by their index. Parent links are
plain ids, so the tree has no reference cycles and can be walked from any
node in either direction.
"""

from __future__ import annotations

import logging
from typing import Iterator

from .errors import StructuralError
from .nodes import NodeKind, SceneNode

logger = logging.getLogger(__name__)

# Which child kinds each container kind accepts
_ACCEPTS: dict[NodeKind, frozenset[NodeKind]] = {
    NodeKind.WORLDBODY: frozenset({NodeKind.BODY, NodeKind.GEOM, NodeKind.JOINT}),
    NodeKind.BODY: frozenset({NodeKind.BODY, NodeKind.GEOM, NodeKind.JOINT}),
    NodeKind.ASSET: frozenset({NodeKind.MESH, NodeKind.TEXTURE, NodeKind.MATERIAL}),
}

_ROOT_KINDS = (NodeKind.WORLDBODY, NodeKind.DEFAULT, NodeKind.ASSET)


class SceneTree:
    """All nodes of one document plus its three named roots.

    A document has at most one root of each of ``worldbody``, ``default``
    and ``asset``. Children are kept in insertion order.

    Example:
        tree = SceneTree()
        world = tree.set_root(SceneNode.create(NodeKind.WORLDBODY))
        body = tree.attach(world, SceneNode.create(NodeKind.BODY, {"pos": "1 0 0"}))
        tree.attach(body, SceneNode.create(NodeKind.GEOM, {"type": "box"}))
    """

    def __init__(self) -> None:
        self.nodes: list[SceneNode] = []
        self.roots: dict[NodeKind, int] = {}

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, node_id: int) -> SceneNode:
        return self.nodes[node_id]

    @property
    def worldbody(self) -> SceneNode | None:
        return self._root(NodeKind.WORLDBODY)

    @property
    def defaults(self) -> SceneNode | None:
        return self._root(NodeKind.DEFAULT)

    @property
    def assets(self) -> SceneNode | None:
        return self._root(NodeKind.ASSET)

    def _root(self, kind: NodeKind) -> SceneNode | None:
        node_id = self.roots.get(kind)
        return self.nodes[node_id] if node_id is not None else None

    def _register(self, node: SceneNode) -> int:
        if node.id != -1:
            raise StructuralError(f"{node!r} is already part of a tree")
        node.id = len(self.nodes)
        self.nodes.append(node)
        return node.id

    def set_root(self, node: SceneNode) -> int:
        """Register ``node`` as the root of its kind.

        Raises:
            StructuralError: If the node's kind cannot be a root
        """
        if node.kind not in _ROOT_KINDS:
            raise StructuralError(f"<{node.tag}> cannot be a document root")

        if node.kind in self.roots:
            logger.warning(f"Replacing earlier root-level <{node.tag}>")

        node_id = self._register(node)
        self.roots[node.kind] = node_id
        return node_id

    def attach(self, parent_id: int, node: SceneNode) -> int | None:
        """Attach a detached node as the last child of ``parent_id``.

        A default scope keeps nested defaults as children. Any other element
        inside a default is not added to the tree; its attributes are
        recorded as what that tag inherits from the scope.

        A parent whose kind cannot hold children drops the node with a
        warning.

        Returns:
            The new node id, or None if the node was captured or dropped

        Raises:
            StructuralError: If the parent cannot hold a node of this kind
        """
        parent = self.nodes[parent_id]

        if parent.kind is NodeKind.DEFAULT and node.kind is not NodeKind.DEFAULT:
            parent.data.element_attrs[node.tag] = dict(node.attrs)
            logger.debug(f"Default class {parent.class_name!r} captured <{node.tag}>")
            return None

        if parent.kind is NodeKind.DEFAULT:
            return self._append(parent, node)

        if not parent.kind.is_container:
            logger.warning(
                f"<{parent.tag}> cannot hold children, discarding <{node.tag}>"
            )
            return None

        if node.kind not in _ACCEPTS[parent.kind]:
            raise StructuralError(f"<{node.tag}> cannot be placed inside <{parent.tag}>")

        if parent.childclass is not None:
            self._stamp_class(node, parent.childclass)

        return self._append(parent, node)

    def _append(self, parent: SceneNode, node: SceneNode) -> int:
        node_id = self._register(node)
        node.parent = parent.id
        parent.children.append(node_id)
        logger.debug(f"Attached {node!r} to {parent!r}")
        return node_id

    @staticmethod
    def _stamp_class(node: SceneNode, class_name: str) -> None:
        node.set_attr("class", class_name)
        node.set_attr("childclass", class_name)

    def add_attr(self, node_id: int, key: str, value: str) -> bool:
        """Set an attribute on a node in the tree (first write wins).

        Setting ``childclass`` on a body or worldbody also stamps the class
        onto the children it already has.
        """
        node = self.nodes[node_id]
        recorded = node.set_attr(key, value)

        if recorded and key == "childclass":
            for child in self.children(node_id):
                self._stamp_class(child, value)
        return recorded

    def children(self, node_id: int) -> list[SceneNode]:
        """Direct children of a node, in insertion order."""
        return [self.nodes[child_id] for child_id in self.nodes[node_id].children]

    def parent(self, node_id: int) -> SceneNode | None:
        parent_id = self.nodes[node_id].parent
        return self.nodes[parent_id] if parent_id is not None else None

    def iter_nodes(self, root_id: int, include_self: bool = True) -> Iterator[SceneNode]:
        """Iterate over a node and all its descendants (depth-first).

        Args:
            root_id: Id of the node to start from
            include_self: Whether to include the start node itself

        Yields:
            SceneNode instances
        """
        node = self.nodes[root_id]
        if include_self:
            yield node
        for child_id in node.children:
            yield from self.iter_nodes(child_id, include_self=True)

    def find(self, name: str, kind: NodeKind | None = None) -> SceneNode | None:
        """Find the first node with ``name`` (and ``kind``, if given)."""
        for node in self.nodes:
            if node.name == name and (kind is None or node.kind is kind):
                return node
        return None

    def depth(self, node_id: int) -> int:
        """Depth of a node below its root (root = 0)."""
        depth = 0
        parent_id = self.nodes[node_id].parent
        while parent_id is not None:
            depth += 1
            parent_id = self.nodes[parent_id].parent
        return depth

    def __repr__(self) -> str:
        roots = ", ".join(kind.value for kind in self.roots)
        return f"SceneTree({len(self.nodes)} nodes, roots=[{roots}])"
