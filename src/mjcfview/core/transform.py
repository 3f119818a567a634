"""Transform class for body and geom placement."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Self

import numpy as np
from numpy.typing import NDArray


def euler_matrix(angles: NDArray[np.float64] | tuple[float, float, float]) -> NDArray[np.float64]:
    """Build the 3x3 rotation matrix for Euler angles given in degrees.

    The entries are the Tait-Bryan products of the x/y/z sines and cosines
    laid out row-major as below. This is the transpose of the usual
    ``Rz @ Ry @ Rx`` composition; scene files are authored against this
    axis convention, so it must not be swapped for a library rotation.
    """
    rx, ry, rz = np.radians(np.asarray(angles, dtype=np.float64))

    cos_x, sin_x = np.cos(rx), np.sin(rx)
    cos_y, sin_y = np.cos(ry), np.sin(ry)
    cos_z, sin_z = np.cos(rz), np.sin(rz)

    return np.array([
        [
            cos_y * cos_z,
            cos_y * sin_z,
            -sin_y,
        ],
        [
            sin_x * sin_y * cos_z - cos_x * sin_z,
            sin_x * sin_y * sin_z + cos_x * cos_z,
            sin_x * cos_y,
        ],
        [
            cos_x * sin_y * cos_z + sin_x * sin_z,
            cos_x * sin_y * sin_z - sin_x * cos_z,
            cos_x * cos_y,
        ],
    ], dtype=np.float64)


@dataclass
class Transform:
    """Placement of a body or geom relative to its parent.

    Rotation is stored as Euler angles in degrees, as written in the
    document. Extra rotations are appended after construction (for example
    by a puzzle plugin) and are composed in insertion order, each one
    left-multiplied onto the previous ones.
    """

    translation: NDArray[np.float64] = field(
        default_factory=lambda: np.zeros(3, dtype=np.float64)
    )
    rotation: NDArray[np.float64] = field(
        default_factory=lambda: np.zeros(3, dtype=np.float64)
    )
    scale: NDArray[np.float64] = field(
        default_factory=lambda: np.ones(3, dtype=np.float64)
    )
    extra_rotations: list[NDArray[np.float64]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.translation = np.asarray(self.translation, dtype=np.float64)
        self.rotation = np.asarray(self.rotation, dtype=np.float64)
        self.scale = np.asarray(self.scale, dtype=np.float64)
        self.extra_rotations = [
            np.asarray(r, dtype=np.float64) for r in self.extra_rotations
        ]

    def add_rotation(self, angles: NDArray[np.float64] | tuple[float, float, float]) -> None:
        """Append an extra Euler rotation (degrees) applied after the own rotation."""
        self.extra_rotations.append(np.asarray(angles, dtype=np.float64))

    def linear_matrix(self) -> NDArray[np.float64]:
        """Combined 3x3 matrix: extra rotations, then own rotation, then scale.

        Order: Scale -> Rotate -> Extra rotations (in insertion order)
        """
        extra = np.eye(3, dtype=np.float64)
        for angles in self.extra_rotations:
            extra = euler_matrix(angles) @ extra

        return extra @ euler_matrix(self.rotation) @ np.diag(self.scale)

    def to_matrix(self) -> NDArray[np.float64]:
        """Convert to a 4x4 homogeneous transformation matrix."""
        matrix = np.eye(4, dtype=np.float64)
        matrix[:3, :3] = self.linear_matrix()
        matrix[:3, 3] = self.translation
        return matrix

    def apply(self, vertices: NDArray[np.float64]) -> NDArray[np.float64]:
        """Transform an Nx3 vertex array, returning a new array."""
        vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        ones = np.ones((len(vertices), 1))
        homogeneous = np.hstack([vertices, ones])
        transformed = (self.to_matrix() @ homogeneous.T).T
        return transformed[:, :3]

    @property
    def is_identity(self) -> bool:
        """True when applying this transform cannot move any vertex."""
        return (
            not self.extra_rotations
            and not self.translation.any()
            and not self.rotation.any()
            and bool(np.all(self.scale == 1.0))
        )

    def copy(self) -> Self:
        """Create a deep copy of this transform."""
        return Transform(
            translation=self.translation.copy(),
            rotation=self.rotation.copy(),
            scale=self.scale.copy(),
            extra_rotations=[r.copy() for r in self.extra_rotations],
        )
