"""Convex hull triangulation of a point cloud."""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray
from scipy.spatial import ConvexHull, QhullError

from ..core.errors import GeometryError
from ..core.geometry import orient_triangle
from ..core.mesh import DrawableMesh
from .base import MeshGenerator


@dataclass
class HullGenerator(MeshGenerator):
    """Triangulates the convex hull of an unordered 3D point cloud.

    Every hull facet becomes its own triangle with three fresh vertices;
    vertices are not shared between facets. Facets are wound so their
    normals point out of the hull.

    Attributes:
        points: Nx3 point cloud
    """

    points: NDArray[np.float64] = field(default_factory=lambda: np.zeros((0, 3)))

    def hull(self) -> ConvexHull:
        """Compute the hull of ``points``.

        Raises:
            GeometryError: If the points do not span a 3D volume
        """
        points = np.asarray(self.points, dtype=np.float64).reshape(-1, 3)
        if len(points) < 4:
            raise GeometryError(f"Convex hull needs at least 4 points, got {len(points)}")
        try:
            return ConvexHull(points)
        except QhullError as e:
            raise GeometryError(f"Convex hull failed: {e}") from e

    def generate(self) -> DrawableMesh:
        """Three vertices and three sequential indices per hull facet."""
        hull = self.hull()
        points = hull.points

        triangles = [
            orient_triangle(simplex, points, equation[:3])
            for simplex, equation in zip(hull.simplices, hull.equations)
        ]
        vertices = points[np.array(triangles, dtype=np.int64).reshape(-1)]
        indices = np.arange(len(vertices), dtype=np.uint32)
        return DrawableMesh(vertices, indices)
