"""Primitive geometry generators.

Primitives are built in the geom's local frame but already centered at the
geom position, so the geom transform that follows shifts them once more.
"""

import logging
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from ..core.geometry import make_cap_faces, make_tube_faces
from ..core.mesh import DrawableMesh
from ..core.nodes import GeomType
from .base import MeshGenerator

logger = logging.getLogger(__name__)

# Two triangles per face over the corner order produced by BoxGenerator
BOX_INDICES = np.array([
    0, 1, 2, 1, 2, 3,
    4, 5, 6, 5, 6, 7,
    0, 1, 4, 1, 4, 5,
    2, 3, 6, 3, 6, 7,
    0, 2, 4, 2, 4, 6,
    1, 3, 5, 3, 5, 7,
], dtype=np.uint32)


def _zeros() -> NDArray[np.float64]:
    return np.zeros(3, dtype=np.float64)


def uv_grid_indices(rows: int, segments: int) -> NDArray[np.uint32]:
    """Indices for a grid of ``rows`` rings of ``segments`` vertices each.

    Each cell (i, j) yields triangles (first, first+1, second) and
    (first+1, second, second+1), wrapping around each ring but not from the
    last ring back to the first.
    """
    ring, seg = np.meshgrid(np.arange(rows - 1), np.arange(segments), indexing="ij")
    first = ring * segments + seg
    first_next = ring * segments + (seg + 1) % segments
    second = first + segments
    second_next = first_next + segments

    cells = np.stack([first, first_next, second, first_next, second, second_next], axis=-1)
    return cells.reshape(-1).astype(np.uint32)


@dataclass
class BoxGenerator(MeshGenerator):
    """Generates the 8 corners of a box.

    Attributes:
        center: Box center
        half_extents: Half size along X, Y and Z
    """

    center: NDArray[np.float64] = field(default_factory=_zeros)
    half_extents: NDArray[np.float64] = field(default_factory=lambda: np.ones(3))

    def generate(self) -> DrawableMesh:
        """Corners ordered by x, then y, then z sign (minus before plus)."""
        signs = np.array(
            [[sx, sy, sz] for sx in (-1, 1) for sy in (-1, 1) for sz in (-1, 1)],
            dtype=np.float64,
        )
        vertices = np.asarray(self.center) + signs * np.asarray(self.half_extents)
        return DrawableMesh(vertices, BOX_INDICES.copy())


@dataclass
class SphereGenerator(MeshGenerator):
    """Generates a UV sphere (or ellipsoid) with its poles on the Y axis.

    Attributes:
        center: Sphere center
        radii: Radius along X, Y and Z
        lat_segments: Number of latitude bands
        lon_segments: Number of longitude segments
    """

    center: NDArray[np.float64] = field(default_factory=_zeros)
    radii: NDArray[np.float64] = field(default_factory=lambda: np.ones(3))
    lat_segments: int = 32
    lon_segments: int = 32

    def generate(self) -> DrawableMesh:
        """(lat+1) * lon vertices and lat * lon * 6 indices."""
        theta = np.pi * np.arange(self.lat_segments + 1) / self.lat_segments
        phi = 2 * np.pi * np.arange(self.lon_segments) / self.lon_segments
        theta, phi = np.meshgrid(theta, phi, indexing="ij")

        unit = np.stack([
            np.sin(theta) * np.cos(phi),
            np.cos(theta),
            np.sin(theta) * np.sin(phi),
        ], axis=-1).reshape(-1, 3)

        vertices = np.asarray(self.center) + unit * np.asarray(self.radii)
        indices = uv_grid_indices(self.lat_segments + 1, self.lon_segments)
        return DrawableMesh(vertices, indices)


@dataclass
class CapsuleGenerator(MeshGenerator):
    """Generates a capsule along the Z axis.

    The equator ring is emitted twice, once per hemisphere, and the two
    hemispheres are pushed apart by the half length.

    Attributes:
        center: Capsule center
        radius: Radius of the hemispheres and the side
        half_length: Half length of the cylindrical part
        lat_segments: Number of latitude bands over both hemispheres (even)
        lon_segments: Number of longitude segments
    """

    center: NDArray[np.float64] = field(default_factory=_zeros)
    radius: float = 1.0
    half_length: float = 1.0
    lat_segments: int = 32
    lon_segments: int = 32

    def generate(self) -> DrawableMesh:
        half = self.lat_segments // 2
        rows = np.concatenate([np.arange(half + 1), np.arange(half, 2 * half + 1)])
        theta = np.pi * rows / (2 * half)
        phi = 2 * np.pi * np.arange(self.lon_segments) / self.lon_segments
        shift = np.where(np.arange(len(rows)) <= half, self.half_length, -self.half_length)

        theta, phi = np.meshgrid(theta, phi, indexing="ij")
        offsets = np.repeat(shift, self.lon_segments)

        vertices = self.radius * np.stack([
            np.sin(theta) * np.cos(phi),
            np.sin(theta) * np.sin(phi),
            np.cos(theta),
        ], axis=-1).reshape(-1, 3)
        vertices[:, 2] += offsets
        vertices += np.asarray(self.center)

        indices = uv_grid_indices(len(rows), self.lon_segments)
        return DrawableMesh(vertices, indices)


@dataclass
class CylinderGenerator(MeshGenerator):
    """Generates a capped cylinder along the Z axis.

    Attributes:
        center: Cylinder center
        radius: Radius of the cylinder
        half_length: Half of the cylinder height
        segments: Number of segments around the circumference
    """

    center: NDArray[np.float64] = field(default_factory=_zeros)
    radius: float = 1.0
    half_length: float = 1.0
    segments: int = 32

    def generate(self) -> DrawableMesh:
        """Top ring, bottom ring, then the two cap centers."""
        n = self.segments
        angles = 2 * np.pi * np.arange(n) / n
        ring = np.stack([
            self.radius * np.cos(angles),
            self.radius * np.sin(angles),
            np.zeros(n),
        ], axis=-1)

        top = ring + [0.0, 0.0, self.half_length]
        bottom = ring - [0.0, 0.0, self.half_length]
        centers = np.array([[0.0, 0.0, self.half_length], [0.0, 0.0, -self.half_length]])
        vertices = np.vstack([top, bottom, centers])

        top_ring = list(range(n))
        bottom_ring = list(range(n, 2 * n))
        top_center, bottom_center = 2 * n, 2 * n + 1

        faces = make_tube_faces(top_ring, bottom_ring, vertices, axis=2)
        faces += make_cap_faces(top_center, top_ring, np.array([0.0, 0.0, 1.0]), vertices)
        faces += make_cap_faces(bottom_center, bottom_ring, np.array([0.0, 0.0, -1.0]), vertices)

        vertices = vertices + np.asarray(self.center)
        return DrawableMesh(vertices, np.array(faces, dtype=np.uint32).reshape(-1))


@dataclass
class PlaneGenerator(MeshGenerator):
    """Generates a rectangle in the XY plane facing +Z.

    Attributes:
        center: Plane center
        half_x: Half extent along X
        half_y: Half extent along Y
    """

    center: NDArray[np.float64] = field(default_factory=_zeros)
    half_x: float = 1.0
    half_y: float = 1.0

    def generate(self) -> DrawableMesh:
        hx, hy = self.half_x, self.half_y
        vertices = np.array([
            [-hx, -hy, 0.0],
            [hx, -hy, 0.0],
            [hx, hy, 0.0],
            [-hx, hy, 0.0],
        ]) + np.asarray(self.center)
        indices = np.array([0, 1, 2, 0, 2, 3], dtype=np.uint32)
        return DrawableMesh(vertices, indices)


def primitive_generator(
    geom_type: GeomType,
    center: NDArray[np.float64],
    size: NDArray[np.float64],
    subdivisions: int = 32,
    cylinder_segments: int = 32,
) -> MeshGenerator | None:
    """Generator for a primitive geom type, or None if it has no geometry.

    Args:
        geom_type: Kind of primitive
        center: Geom position
        size: The geom's three size values
        subdivisions: Latitude and longitude count for round primitives
        cylinder_segments: Ring segment count for cylinders
    """
    if geom_type is GeomType.BOX:
        return BoxGenerator(center=center, half_extents=size)
    if geom_type is GeomType.SPHERE:
        return SphereGenerator(
            center=center,
            radii=np.full(3, size[0]),
            lat_segments=subdivisions,
            lon_segments=subdivisions,
        )
    if geom_type is GeomType.ELLIPSOID:
        return SphereGenerator(
            center=center,
            radii=size,
            lat_segments=subdivisions,
            lon_segments=subdivisions,
        )
    if geom_type is GeomType.CAPSULE:
        return CapsuleGenerator(
            center=center,
            radius=float(size[0]),
            half_length=float(size[1]),
            lat_segments=subdivisions + subdivisions % 2,
            lon_segments=subdivisions,
        )
    if geom_type is GeomType.CYLINDER:
        return CylinderGenerator(
            center=center,
            radius=float(size[0]),
            half_length=float(size[1]),
            segments=cylinder_segments,
        )
    if geom_type is GeomType.PLANE:
        return PlaneGenerator(center=center, half_x=float(size[0]), half_y=float(size[1]))

    logger.warning(f"Geom type {geom_type.value!r} has no geometry, skipping")
    return None
