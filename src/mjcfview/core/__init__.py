"""Core data structures for scene compilation."""

from .errors import (
    AssetResolutionError,
    AttributeValueError,
    CompileError,
    GeometryError,
    ParseError,
    StructuralError,
)
from .mesh import DrawableMesh, FillingKind, MeshCollection, VertexFilling
from .nodes import (
    CUBE_FACE_ORDER,
    DEFAULT_CLASS,
    GeomType,
    JointType,
    MeshContent,
    NodeKind,
    SceneNode,
    TextureType,
)
from .transform import Transform, euler_matrix
from .tree import SceneTree

__all__ = [
    "AssetResolutionError",
    "AttributeValueError",
    "CompileError",
    "GeometryError",
    "ParseError",
    "StructuralError",
    "DrawableMesh",
    "FillingKind",
    "MeshCollection",
    "VertexFilling",
    "CUBE_FACE_ORDER",
    "DEFAULT_CLASS",
    "GeomType",
    "JointType",
    "MeshContent",
    "NodeKind",
    "SceneNode",
    "TextureType",
    "Transform",
    "euler_matrix",
    "SceneTree",
]
