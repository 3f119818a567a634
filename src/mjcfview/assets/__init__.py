"""Asset binding and asset file loading."""

from .files import AssetFileLoader
from .manager import AssetManager
from .obj import parse_obj
from .texture import extract_cube_face, fallback_face

__all__ = [
    "AssetFileLoader",
    "AssetManager",
    "parse_obj",
    "extract_cube_face",
    "fallback_face",
]
