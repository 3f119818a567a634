"""Bind asset references and track the files assets need."""

from __future__ import annotations

import logging
from typing import Iterator

from ..core.errors import AssetResolutionError
from ..core.nodes import GeomType, MeshContent, NodeKind, SceneNode, TextureData
from ..core.tree import SceneTree
from .obj import parse_obj

logger = logging.getLogger(__name__)


class AssetManager:
    """Name lookup over the ``asset`` root and the asset binding pass.

    Lookups are by (name, kind); when several assets share a name the first
    one in document order wins. Meshes and textures without a ``name`` are
    found by their file stem.

    Example:
        manager = AssetManager(tree)
        manager.apply_assets()
        for path in manager.to_load_files():
            ...
    """

    def __init__(self, tree: SceneTree) -> None:
        self.tree = tree

    def assets(self, kind: NodeKind | None = None) -> Iterator[SceneNode]:
        """Children of the asset root, optionally of one kind, in order."""
        root = self.tree.assets
        if root is None:
            return
        for child in self.tree.children(root.id):
            if kind is None or child.kind is kind:
                yield child

    def lookup(self, name: str, kind: NodeKind) -> SceneNode | None:
        """First asset of ``kind`` named ``name``, or None."""
        for node in self.assets(kind):
            if node.data.asset_name == name:
                return node
        return None

    def bind_material_textures(self) -> int:
        """Bind each material to its texture.

        A material naming a texture binds that texture; otherwise a texture
        with the material's own name is bound if one exists. Materials that
        already have a texture are left alone.

        Returns:
            Number of materials newly bound

        Raises:
            AssetResolutionError: If a named texture does not exist
        """
        bound = 0
        for material in self.assets(NodeKind.MATERIAL):
            data = material.data
            if data.texture_id is not None:
                continue

            if data.texture_name is not None:
                texture = self.lookup(data.texture_name, NodeKind.TEXTURE)
                if texture is None:
                    raise AssetResolutionError(
                        f"Material {data.name!r} references unknown texture {data.texture_name!r}"
                    )
            elif data.name:
                texture = self.lookup(data.name, NodeKind.TEXTURE)
            else:
                texture = None

            if texture is not None:
                data.texture_id = texture.id
                bound += 1
                logger.debug(f"Material {data.name!r} bound to texture {texture.data.asset_name!r}")
        return bound

    def apply_assets(self) -> int:
        """Bind mesh and material references of every geom in the worldbody.

        Material textures are bound first.

        Returns:
            Number of references bound

        Raises:
            AssetResolutionError: If a mesh geom has no resolvable mesh, or a
                material reference names a missing material
        """
        self.bind_material_textures()

        worldbody = self.tree.worldbody
        if worldbody is None:
            return 0

        bound = 0
        for node in self.tree.iter_nodes(worldbody.id):
            if node.kind is not NodeKind.GEOM:
                continue
            bound += self._bind_geom(node)
        return bound

    def _bind_geom(self, geom: SceneNode) -> int:
        data = geom.data
        bound = 0

        if data.geom_type is GeomType.MESH and data.mesh_id is None:
            mesh = self.lookup(data.mesh_name, NodeKind.MESH) if data.mesh_name else None
            if mesh is None:
                raise AssetResolutionError(
                    f"Mesh geom {_label(geom)} references unknown mesh {data.mesh_name!r}"
                )
            data.mesh_id = mesh.id
            bound += 1
            logger.debug(f"Geom {_label(geom)} bound to mesh {data.mesh_name!r}")

        if data.material_name is not None and data.material_id is None:
            material = self.lookup(data.material_name, NodeKind.MATERIAL)
            if material is None:
                raise AssetResolutionError(
                    f"Geom {_label(geom)} references unknown material {data.material_name!r}"
                )
            data.material_id = material.id
            bound += 1
            logger.debug(f"Geom {_label(geom)} bound to material {data.material_name!r}")

        return bound

    def to_load_files(self) -> list[str]:
        """Distinct files referenced by textures and file-backed meshes, in order."""
        files: list[str] = []
        for node in self.assets():
            if node.kind is NodeKind.TEXTURE:
                path = node.data.file
            elif node.kind is NodeKind.MESH and node.data.content is MeshContent.FILE:
                path = node.data.file
            else:
                continue
            if path and path not in files:
                files.append(path)
        return files

    def load_dimensions(self, dimensions: dict[str, tuple[int, int]]) -> int:
        """Record (width, height) for textures whose file is a key of ``dimensions``."""
        updated = 0
        for texture in self.assets(NodeKind.TEXTURE):
            if texture.data.file in dimensions:
                width, height = dimensions[texture.data.file]
                texture.data.dimensions = (int(width), int(height))
                updated += 1
        return updated

    def load_files(self, contents: dict[str, bytes]) -> int:
        """Record raw RGB8 bytes for textures whose file is a key of ``contents``."""
        updated = 0
        for texture in self.assets(NodeKind.TEXTURE):
            if texture.data.file in contents:
                texture.data.file_data = bytes(contents[texture.data.file])
                updated += 1
        return updated

    def load_obj_meshes(self, texts: dict[str, str]) -> int:
        """Parse OBJ text into file-backed meshes whose file is a key of ``texts``."""
        updated = 0
        for mesh in self.assets(NodeKind.MESH):
            data = mesh.data
            if data.content is MeshContent.FILE and data.file in texts:
                data.vertices, data.indices = parse_obj(texts[data.file], source=data.file)
                updated += 1
        return updated

    def loaded_textures(self) -> list[TextureData]:
        """Textures bound to a material whose image data has been loaded."""
        bound_ids = {
            material.data.texture_id
            for material in self.assets(NodeKind.MATERIAL)
            if material.data.texture_id is not None
        }
        return [
            texture.data
            for texture in self.assets(NodeKind.TEXTURE)
            if texture.id in bound_ids and texture.data.is_loaded
        ]


def _label(node: SceneNode) -> str:
    return repr(node.name) if node.name else f"#{node.id}"
