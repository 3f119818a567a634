"""Plugins that post-process a loaded scene tree."""

from .base import Plugin, PluginCapabilities, PluginManager
from .rubiks import CubeMove, RubiksCubePlugin

__all__ = ["Plugin", "PluginCapabilities", "PluginManager", "CubeMove", "RubiksCubePlugin"]
