"""Geometry taken from an imported polygon file."""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from ..core.mesh import DrawableMesh
from .base import MeshGenerator


@dataclass
class ImportedMeshGenerator(MeshGenerator):
    """Passes pre-triangulated vertices and indices through unchanged.

    Attributes:
        vertices: Nx3 vertex positions from the parsed file
        indices: Flat triangle indices from the parsed file
    """

    vertices: NDArray[np.float64] = field(default_factory=lambda: np.zeros((0, 3)))
    indices: NDArray[np.uint32] = field(default_factory=lambda: np.zeros(0, dtype=np.uint32))

    def generate(self) -> DrawableMesh:
        return DrawableMesh(np.array(self.vertices, dtype=np.float64), np.array(self.indices))
