"""Winding helpers shared by the geometry generators.

Convention: a triangle (A, B, C) faces the direction of (B-A) x (C-A), so
counter-clockwise winding seen from outside gives an outward normal.
"""

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

_EPSILON = 1e-10


def compute_triangle_normal(
    v0: NDArray[np.float64],
    v1: NDArray[np.float64],
    v2: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Unit normal of a triangle, (v1-v0) x (v2-v0).

    A degenerate triangle returns the zero vector so that it never counts as
    facing any direction.
    """
    normal = np.cross(v1 - v0, v2 - v0)
    length = np.linalg.norm(normal)
    if length > _EPSILON:
        return normal / length
    return np.zeros(3)


def orient_triangle(
    triangle: Sequence[int],
    vertices: NDArray[np.float64],
    direction: NDArray[np.float64],
) -> list[int]:
    """Return ``triangle`` wound so that its normal points along ``direction``."""
    i0, i1, i2 = triangle
    normal = compute_triangle_normal(vertices[i0], vertices[i1], vertices[i2])
    if np.dot(normal, direction) >= 0:
        return [i0, i1, i2]
    return [i0, i2, i1]


def make_cap_faces(
    center_idx: int,
    ring_indices: Sequence[int],
    normal_direction: NDArray[np.float64],
    vertices: NDArray[np.float64],
) -> list[list[int]]:
    """Triangle fan from a center vertex to a ring, facing ``normal_direction``."""
    n = len(ring_indices)
    return [
        orient_triangle(
            (center_idx, ring_indices[i], ring_indices[(i + 1) % n]),
            vertices,
            normal_direction,
        )
        for i in range(n)
    ]


def make_tube_faces(
    top_ring_indices: Sequence[int],
    bottom_ring_indices: Sequence[int],
    vertices: NDArray[np.float64],
    axis: int = 2,
) -> list[list[int]]:
    """Quads (as triangle pairs) joining two rings, facing away from ``axis``.

    Args:
        top_ring_indices: Indices of one ring
        bottom_ring_indices: Indices of the other ring, same order
        vertices: The vertex array
        axis: Coordinate index of the tube axis (0=X, 1=Y, 2=Z)

    Returns:
        List of face index triples with radially outward normals
    """
    faces = []
    n = len(top_ring_indices)

    for i in range(n):
        i_next = (i + 1) % n
        top0, top1 = top_ring_indices[i], top_ring_indices[i_next]
        bot0, bot1 = bottom_ring_indices[i], bottom_ring_indices[i_next]

        mid = (vertices[top0] + vertices[top1] + vertices[bot0] + vertices[bot1]) / 4
        outward = mid.copy()
        outward[axis] = 0.0

        faces.append(orient_triangle((top0, top1, bot0), vertices, outward))
        faces.append(orient_triangle((top1, bot1, bot0), vertices, outward))

    return faces


def verify_outward_normals(
    vertices: NDArray[np.float64],
    faces: NDArray[np.int64],
    center: NDArray[np.float64] | None = None,
) -> tuple[bool, list[int]]:
    """Check that every face normal points away from ``center``.

    Args:
        vertices: Nx3 vertex array
        faces: Mx3 face index array
        center: Reference point; the vertex centroid when None

    Returns:
        Tuple of (all_valid, list_of_bad_face_indices)
    """
    if center is None:
        center = vertices.mean(axis=0)

    bad_faces = []
    for i, (i0, i1, i2) in enumerate(faces):
        v0, v1, v2 = vertices[i0], vertices[i1], vertices[i2]
        normal = compute_triangle_normal(v0, v1, v2)
        outward = (v0 + v1 + v2) / 3 - center
        if np.linalg.norm(outward) > _EPSILON and np.dot(normal, outward) < 0:
            bad_faces.append(i)

    return len(bad_faces) == 0, bad_faces
