"""Plugin protocol and registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ..core.tree import SceneTree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PluginCapabilities:
    """Which hooks a registered plugin receives."""

    process_model_load: bool = True
    process_sim_loop: bool = False


@runtime_checkable
class Plugin(Protocol):
    """Protocol for scene plugins.

    Plugins may mutate the tree (for example by appending extra rotations
    to bodies); the scene is recompiled afterwards.
    """

    def process_model_load(self, tree: SceneTree) -> None:
        """Called once after a document has been loaded."""
        ...

    def process_sim_loop(self, tree: SceneTree) -> None:
        """Called once per simulation step."""
        ...


class PluginManager:
    """Registered plugins, dispatched in registration order."""

    def __init__(self) -> None:
        self._plugins: list[tuple[PluginCapabilities, Plugin]] = []

    def register(self, plugin: Plugin, capabilities: PluginCapabilities | None = None) -> Plugin:
        """Register a plugin (returned for chaining)."""
        self._plugins.append((capabilities or PluginCapabilities(), plugin))
        logger.debug(f"Registered plugin {type(plugin).__name__}")
        return plugin

    def __len__(self) -> int:
        return len(self._plugins)

    def process_model_load(self, tree: SceneTree) -> None:
        for capabilities, plugin in self._plugins:
            if capabilities.process_model_load:
                plugin.process_model_load(tree)

    def process_sim_loop(self, tree: SceneTree) -> None:
        for capabilities, plugin in self._plugins:
            if capabilities.process_sim_loop:
                plugin.process_sim_loop(tree)
