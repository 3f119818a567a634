"""Parse OBJ polygon text into triangle data."""

from __future__ import annotations

import io

import numpy as np
import trimesh
from numpy.typing import NDArray

from ..core.errors import AssetResolutionError


def parse_obj(text: str, source: str = "<string>") -> tuple[NDArray[np.float64], NDArray[np.uint32]]:
    """Parse OBJ text into vertices and a flat triangle index array.

    Polygons with more than three corners are triangulated by the loader.
    Vertex order is kept as written.

    Args:
        text: OBJ file content
        source: Name used in error messages

    Returns:
        Tuple of (Nx3 vertices, flat uint32 indices)

    Raises:
        AssetResolutionError: If the text holds no triangle mesh
    """
    try:
        mesh = trimesh.load(
            io.BytesIO(text.encode("utf-8")),
            file_type="obj",
            force="mesh",
            process=False,
            maintain_order=True,
        )
    except (ValueError, IndexError) as e:
        raise AssetResolutionError(f"Could not parse OBJ data from {source}: {e}") from e

    if not isinstance(mesh, trimesh.Trimesh) or len(mesh.faces) == 0:
        raise AssetResolutionError(f"OBJ data from {source} contains no faces")

    vertices = np.asarray(mesh.vertices, dtype=np.float64)
    indices = np.asarray(mesh.faces, dtype=np.uint32).reshape(-1)
    return vertices, indices
