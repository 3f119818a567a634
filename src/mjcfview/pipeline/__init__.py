"""Compilation pipeline: staged loading, composition and render handoff."""

from .composer import SceneComposer
from .model import STAGES, SceneModel, Stage
from .state import RenderSnapshot, RenderState

__all__ = ["SceneComposer", "STAGES", "SceneModel", "Stage", "RenderSnapshot", "RenderState"]
