"""Drawable meshes and the flattened mesh collection handed to renderers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    import trimesh
    from .nodes import TextureData


# Width of one interleaved vertex row: position, color, texcoord
VERTEX_STRIDE = 9

DEFAULT_TINT = (209.0 / 255.0, 180.0 / 255.0, 50.0 / 255.0)


class FillingKind(Enum):
    """What the per-vertex filling of a mesh holds."""

    COLOR = "color"
    TEXCOORD_2D = "texcoord_2d"
    TEXCOORD_CUBE = "texcoord_cube"


@dataclass
class VertexFilling:
    """Non-positional per-vertex data: one row per vertex, one kind per mesh.

    Attributes:
        kind: Which of color / 2D texcoord / cube texcoord this filling is
        values: Nx3 (color, cube) or Nx2 (2D texcoord) array
    """

    kind: FillingKind
    values: NDArray[np.float64]

    def __post_init__(self) -> None:
        self.values = np.asarray(self.values, dtype=np.float64)
        width = 2 if self.kind is FillingKind.TEXCOORD_2D else 3
        if self.values.ndim != 2 or self.values.shape[1] != width:
            raise ValueError(
                f"{self.kind.value} filling needs Nx{width} values, got {self.values.shape}"
            )

    @classmethod
    def solid(cls, color: tuple[float, float, float], count: int) -> VertexFilling:
        """Same color repeated for ``count`` vertices."""
        return cls(FillingKind.COLOR, np.tile(np.asarray(color, dtype=np.float64), (count, 1)))

    def __len__(self) -> int:
        return len(self.values)

    def color_columns(self) -> NDArray[np.float64]:
        """Nx3 color block for interleaving (white under textures)."""
        if self.kind is FillingKind.COLOR:
            return self.values
        return np.ones((len(self.values), 3))

    def texcoord_columns(self) -> NDArray[np.float64]:
        """Nx3 texcoord block for interleaving (zeros under solid colors)."""
        if self.kind is FillingKind.COLOR:
            return np.zeros((len(self.values), 3))
        if self.kind is FillingKind.TEXCOORD_2D:
            return np.hstack([self.values, np.zeros((len(self.values), 1))])
        return self.values


class DrawableMesh:
    """One renderable unit: positions, triangle indices, filling and texture.

    Stores vertices as an Nx3 float array and indices as a flat uint32 array
    (three per triangle). Indices always address this mesh's own vertices.
    """

    def __init__(
        self,
        vertices: NDArray[np.float64],
        indices: NDArray[np.uint32],
        filling: VertexFilling | None = None,
        texture: TextureData | None = None,
    ) -> None:
        """Create a drawable mesh.

        Args:
            vertices: Nx3 array (or flat xyz triples) of vertex positions
            indices: Flat array of triangle indices into ``vertices``
            filling: Optional per-vertex filling with exactly N rows
            texture: Optional single texture bound to the mesh

        Raises:
            ValueError: If the filling length or any index does not match
                the vertex count
        """
        self.vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        self.indices = np.asarray(indices, dtype=np.uint32).reshape(-1)
        self.filling = filling
        self.texture = texture

        if filling is not None and len(filling) != len(self.vertices):
            raise ValueError(
                f"Expected {len(self.vertices)} filling entries, got {len(filling)}"
            )
        if len(self.indices) and int(self.indices.max()) >= len(self.vertices):
            raise ValueError(
                f"Index {int(self.indices.max())} out of range for "
                f"{len(self.vertices)} vertices"
            )

    @property
    def vertex_count(self) -> int:
        """Number of vertices in the mesh."""
        return len(self.vertices)

    @property
    def index_count(self) -> int:
        """Number of indices (three per triangle)."""
        return len(self.indices)

    def with_vertices(self, vertices: NDArray[np.float64]) -> DrawableMesh:
        """Copy of this mesh with replaced positions; everything else is shared."""
        return DrawableMesh(
            vertices=vertices,
            indices=self.indices.copy(),
            filling=self.filling,
            texture=self.texture,
        )

    def interleaved_vertices(
        self, tint: tuple[float, float, float] = DEFAULT_TINT
    ) -> NDArray[np.float32]:
        """Nx9 rows of position, color and texcoord.

        A mesh with no filling uses ``tint`` as its color and zero texcoords.
        """
        count = len(self.vertices)
        if self.filling is None:
            colors = np.tile(np.asarray(tint, dtype=np.float64), (count, 1))
            texcoords = np.zeros((count, 3))
        else:
            colors = self.filling.color_columns()
            texcoords = self.filling.texcoord_columns()

        return np.hstack([self.vertices, colors, texcoords]).astype(np.float32)

    def __repr__(self) -> str:
        filling = self.filling.kind.value if self.filling else "none"
        return (
            f"DrawableMesh({self.vertex_count}v, {self.index_count}i, "
            f"filling={filling})"
        )


class MeshCollection:
    """Ordered sequence of drawable meshes forming one compiled scene.

    Flattening produces a single interleaved vertex buffer, one index buffer
    renumbered by the running vertex count, and a draw map with one
    ``(index_count, texture_name)`` entry per sub-mesh.
    """

    def __init__(
        self,
        meshes: list[DrawableMesh] | None = None,
        tint: tuple[float, float, float] = DEFAULT_TINT,
    ) -> None:
        self.meshes: list[DrawableMesh] = list(meshes) if meshes else []
        self.tint = tint

    def add(self, mesh: DrawableMesh) -> DrawableMesh:
        """Append a mesh (returned for chaining)."""
        self.meshes.append(mesh)
        return mesh

    def merge(self, other: MeshCollection) -> MeshCollection:
        """Append all meshes of ``other`` after this collection's meshes."""
        self.meshes.extend(other.meshes)
        return self

    def __len__(self) -> int:
        return len(self.meshes)

    def __iter__(self):
        return iter(self.meshes)

    @property
    def vertex_count(self) -> int:
        """Total number of vertices over all meshes."""
        return sum(mesh.vertex_count for mesh in self.meshes)

    @property
    def index_count(self) -> int:
        """Total number of indices over all meshes."""
        return sum(mesh.index_count for mesh in self.meshes)

    def interleaved_vertices(
        self, tint: tuple[float, float, float] | None = None
    ) -> NDArray[np.float32]:
        """All vertices as one (total, 9) float32 array, in merge order.

        Meshes with no filling get ``tint``, or the collection's own tint.
        """
        tint = self.tint if tint is None else tint
        if not self.meshes:
            return np.empty((0, VERTEX_STRIDE), dtype=np.float32)
        return np.vstack([mesh.interleaved_vertices(tint) for mesh in self.meshes])

    def all_indices(self) -> NDArray[np.uint32]:
        """Concatenated index buffer, each mesh offset by the vertices before it."""
        all_indices = []
        vertex_offset = 0

        for mesh in self.meshes:
            all_indices.append(mesh.indices.astype(np.uint64) + vertex_offset)
            vertex_offset += mesh.vertex_count

        if not all_indices:
            return np.empty(0, dtype=np.uint32)
        if vertex_offset > np.iinfo(np.uint32).max:
            raise OverflowError(f"{vertex_offset} vertices do not fit 32-bit indices")
        return np.concatenate(all_indices).astype(np.uint32)

    def draw_map(self) -> list[tuple[int, str | None]]:
        """One ``(index_count, texture_name or None)`` pair per mesh, in merge order."""
        return [
            (
                mesh.index_count,
                mesh.texture.asset_name if mesh.texture is not None else None,
            )
            for mesh in self.meshes
        ]

    def to_trimesh(
        self, tint: tuple[float, float, float] | None = None
    ) -> trimesh.Trimesh:
        """Convert the flattened collection to a single trimesh.Trimesh.

        Colors from the interleaved buffer become vertex colors; textures are
        not carried over.
        """
        import trimesh as tm

        interleaved = self.interleaved_vertices(tint)
        colors = np.clip(interleaved[:, 3:6], 0.0, 1.0)
        rgba = np.hstack([colors, np.ones((len(colors), 1))])

        return tm.Trimesh(
            vertices=interleaved[:, :3].astype(np.float64),
            faces=self.all_indices().reshape(-1, 3).astype(np.int64),
            vertex_colors=(rgba * 255).astype(np.uint8),
            process=False,  # Keep per-facet vertices as compiled
        )

    def __repr__(self) -> str:
        return (
            f"MeshCollection({len(self.meshes)} meshes, {self.vertex_count}v, "
            f"{self.index_count}i)"
        )
