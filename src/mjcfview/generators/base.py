"""Base classes and protocols for geometry generators."""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from ..core.mesh import DrawableMesh


@runtime_checkable
class Generator(Protocol):
    """Protocol for geometry generators.

    Any class with a generate() method returning a DrawableMesh satisfies
    this protocol.
    """

    def generate(self) -> DrawableMesh:
        """Generate and return local-space geometry."""
        ...


class MeshGenerator(ABC):
    """Abstract base class for local-space geometry generators.

    Generated meshes carry positions and indices only; filling and texture
    are decided later from the geom's material.
    """

    @abstractmethod
    def generate(self) -> DrawableMesh:
        """Generate and return local-space geometry.

        Returns:
            A DrawableMesh with no filling and no texture.
        """
        pass

    def generate_scaled(self, scale: NDArray[np.float64] | None) -> DrawableMesh:
        """Generate geometry and scale it per axis.

        Args:
            scale: Per-axis factors, or None to leave the geometry as is
        """
        mesh = self.generate()
        if scale is None:
            return mesh
        return mesh.with_vertices(mesh.vertices * np.asarray(scale, dtype=np.float64))
