"""Cascade default classes onto the body tree."""

from __future__ import annotations

import logging

from ..core.tree import SceneTree

logger = logging.getLogger(__name__)

ElementAttrs = dict[str, dict[str, str]]


class DefaultResolver:
    """Applies default class attributes to worldbody descendants.

    Each node is matched against the default scopes starting at the root
    scope. A scope whose class equals the node's class applies what it
    recorded for the node's tag. Otherwise the search continues into nested
    scopes, which inherit every tag/key pair they do not set themselves.
    Attributes already on a node are never replaced.

    Every node is resolved from the root scope on its own, so a deep body
    tree re-walks the default scopes once per node.
    """

    def __init__(self, tree: SceneTree) -> None:
        self.tree = tree

    def resolve(self) -> int:
        """Resolve every node under the worldbody.

        Returns:
            Number of attributes set from default classes
        """
        defaults, worldbody = self.tree.defaults, self.tree.worldbody
        if defaults is None or worldbody is None:
            return 0

        applied = self._resolve_subtree(defaults.id, worldbody.id)
        logger.debug(f"Default classes set {applied} attributes")
        return applied

    def _resolve_subtree(self, root_scope_id: int, target_id: int) -> int:
        applied = self.apply_defaults(root_scope_id, target_id, None)
        for child_id in self.tree[target_id].children:
            applied += self._resolve_subtree(root_scope_id, child_id)
        return applied

    def apply_defaults(
        self,
        scope_id: int,
        target_id: int,
        inherited: ElementAttrs | None,
    ) -> int:
        """Apply the scope matching the target's class to the target only.

        Args:
            scope_id: Default scope to search from
            target_id: Node receiving attributes
            inherited: Attribute map of the enclosing scope, merged into this
                scope's map for pairs it does not define

        Returns:
            Number of attributes set on the target
        """
        scope = self.tree[scope_id]
        element_attrs: ElementAttrs = scope.data.element_attrs

        if inherited:
            for tag, attrs in inherited.items():
                own = element_attrs.setdefault(tag, {})
                for key, value in attrs.items():
                    own.setdefault(key, value)

        target = self.tree[target_id]
        if target.class_name == scope.class_name:
            applied = 0
            for key, value in element_attrs.get(target.tag, {}).items():
                if self.tree.add_attr(target_id, key, value):
                    applied += 1
            return applied

        applied = 0
        for nested in self.tree.children(scope_id):
            applied += self.apply_defaults(nested.id, target_id, element_attrs)
        return applied
