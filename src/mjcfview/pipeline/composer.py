"""Compose geometry and transforms into a mesh collection."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from ..config import CompilerConfig
from ..core.errors import AssetResolutionError
from ..core.mesh import DrawableMesh, FillingKind, MeshCollection, VertexFilling
from ..core.nodes import GeomType, MeshContent, NodeKind, SceneNode, TextureData, TextureType
from ..core.tree import SceneTree
from ..generators.base import MeshGenerator
from ..generators.hull import HullGenerator
from ..generators.imported import ImportedMeshGenerator
from ..generators.primitives import primitive_generator


class SceneComposer:
    """Walks the worldbody and produces world-space drawable meshes.

    Composition is bottom-up: a body collects the meshes of its children,
    each already placed by the child's own transform, and applies its own
    transform on top. The worldbody applies none. The tree is only read.

    Example:
        composer = SceneComposer(tree, config)
        collection = composer.compose()
    """

    def __init__(self, tree: SceneTree, config: CompilerConfig | None = None) -> None:
        self.tree = tree
        self.config = config or CompilerConfig()

    def compose(self) -> MeshCollection:
        """Compose the whole worldbody (empty if the document has none)."""
        worldbody = self.tree.worldbody
        if worldbody is None:
            return MeshCollection(tint=self.config.fallback_tint)
        collection = self.compose_node(worldbody.id)
        collection.tint = self.config.fallback_tint
        return collection

    def compose_node(self, node_id: int) -> MeshCollection:
        """Meshes of a node's subtree, placed by the node's own transform."""
        node = self.tree[node_id]

        if node.kind is NodeKind.GEOM:
            mesh = self.geom_mesh(node)
            return MeshCollection([mesh] if mesh is not None else [])

        if node.kind not in (NodeKind.WORLDBODY, NodeKind.BODY):
            return MeshCollection()

        collection = MeshCollection()
        for child_id in node.children:
            collection.merge(self.compose_node(child_id))

        if node.kind is NodeKind.BODY and not node.data.transform.is_identity:
            transform = node.data.transform
            collection = MeshCollection(
                [mesh.with_vertices(transform.apply(mesh.vertices)) for mesh in collection]
            )
        return collection

    def geom_mesh(self, geom: SceneNode) -> DrawableMesh | None:
        """Placed mesh for one geom, with its filling and texture."""
        local = self.local_geometry(geom)
        if local is None:
            return None

        filling, texture = self.filling_for(geom, local.vertices)
        vertices = geom.data.transform.apply(local.vertices)
        return DrawableMesh(vertices, local.indices, filling=filling, texture=texture)

    def local_geometry(self, geom: SceneNode) -> DrawableMesh | None:
        """Geometry of a geom before its own transform.

        Raises:
            AssetResolutionError: If a mesh geom has no bound or loaded mesh
        """
        generator = self._generator_for(geom)
        if generator is None:
            return None

        scale = None
        if geom.data.geom_type is GeomType.MESH:
            scale = self.tree[geom.data.mesh_id].data.scale
        return generator.generate_scaled(scale)

    def _generator_for(self, geom: SceneNode) -> MeshGenerator | None:
        data = geom.data

        if data.geom_type is not GeomType.MESH:
            return primitive_generator(
                data.geom_type,
                data.transform.translation,
                data.size,
                subdivisions=self.config.sphere_subdivisions,
                cylinder_segments=self.config.cylinder_segments,
            )

        if data.mesh_id is None:
            raise AssetResolutionError(f"Mesh geom {geom!r} has no bound mesh asset")

        mesh = self.tree[data.mesh_id].data
        if mesh.content is MeshContent.INLINE:
            return HullGenerator(points=mesh.vertices)

        if len(mesh.indices) == 0:
            raise AssetResolutionError(f"Mesh file {mesh.file!r} has not been loaded")
        return ImportedMeshGenerator(vertices=mesh.vertices, indices=mesh.indices)

    def filling_for(
        self,
        geom: SceneNode,
        vertices: NDArray[np.float64],
    ) -> tuple[VertexFilling | None, TextureData | None]:
        """Per-vertex filling and bound texture for a geom's local vertices.

        A material's cube texture yields cube coordinates (vertices relative
        to their centroid); any other texture is bound without a filling. A
        material color, else the geom's own ``rgba``, yields a solid color.
        """
        data = geom.data
        count = len(vertices)

        if data.material_id is not None:
            material = self.tree[data.material_id].data
            if material.texture_id is not None:
                texture = self.tree[material.texture_id].data
                if texture.texture_type is TextureType.CUBE:
                    coords = vertices - vertices.mean(axis=0)
                    return VertexFilling(FillingKind.TEXCOORD_CUBE, coords), texture
                return None, texture
            if material.rgba is not None:
                return VertexFilling.solid(tuple(material.rgba[:3]), count), None

        if data.rgba is not None:
            return VertexFilling.solid(tuple(data.rgba[:3]), count), None
        return None, None
