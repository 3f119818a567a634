"""mjcfview - compile MuJoCo-style scene documents into render-ready meshes."""

from .config import CompilerConfig, load_config
from .core import CompileError, MeshCollection, SceneTree
from .pipeline import RenderState, SceneModel

__all__ = [
    "CompilerConfig",
    "load_config",
    "CompileError",
    "MeshCollection",
    "SceneTree",
    "RenderState",
    "SceneModel",
]
