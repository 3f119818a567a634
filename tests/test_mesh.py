"""Tests for drawable meshes and mesh collection flattening."""

import numpy as np
import pytest

from mjcfview.core.mesh import (
    DEFAULT_TINT,
    VERTEX_STRIDE,
    DrawableMesh,
    FillingKind,
    MeshCollection,
    VertexFilling,
)
from mjcfview.core.nodes import TextureData
from mjcfview.generators import BoxGenerator, SphereGenerator


def test_empty_collection():
    collection = MeshCollection()
    assert collection.interleaved_vertices().shape == (0, VERTEX_STRIDE)
    assert len(collection.all_indices()) == 0
    assert collection.draw_map() == []


def test_indices_are_offset_per_mesh():
    """Each mesh's indices shift by the vertex count of the meshes before it."""
    first = BoxGenerator().generate()
    second = BoxGenerator(center=np.array([3.0, 0.0, 0.0])).generate()
    collection = MeshCollection([first, second])

    indices = collection.all_indices()
    assert indices.dtype == np.uint32
    assert len(indices) == 72
    np.testing.assert_array_equal(indices[:36], first.indices)
    np.testing.assert_array_equal(indices[36:], first.indices + 8)
    assert indices.max() < collection.vertex_count


def test_flattened_buffers_agree():
    """Indices address the interleaved buffer; the draw map covers every index."""
    meshes = [
        BoxGenerator().generate(),
        SphereGenerator(lat_segments=6, lon_segments=5).generate(),
        BoxGenerator(half_extents=np.array([0.5, 0.5, 2.0])).generate(),
    ]
    collection = MeshCollection(meshes)

    vertices = collection.interleaved_vertices()
    indices = collection.all_indices()
    assert vertices.shape == (8 + 35 + 8, VERTEX_STRIDE)
    assert vertices.dtype == np.float32
    assert indices.max() < len(vertices)
    assert sum(count for count, _ in collection.draw_map()) == len(indices)

    # Sphere triangles point at sphere positions in the flat buffer
    start = 36
    sphere_rows = indices[start:start + meshes[1].index_count]
    np.testing.assert_allclose(
        vertices[sphere_rows, :3], meshes[1].vertices[meshes[1].indices], atol=1e-6
    )


def test_interleaved_rows():
    """Rows hold position, color, then texcoord."""
    plain = BoxGenerator().generate()
    rows = plain.interleaved_vertices()
    np.testing.assert_allclose(rows[0, :3], [-1.0, -1.0, -1.0])
    np.testing.assert_allclose(rows[0, 3:6], DEFAULT_TINT, atol=1e-6)
    np.testing.assert_array_equal(rows[0, 6:], [0.0, 0.0, 0.0])

    colored = DrawableMesh(plain.vertices, plain.indices, VertexFilling.solid((1.0, 0.0, 0.5), 8))
    np.testing.assert_allclose(colored.interleaved_vertices()[3, 3:6], [1.0, 0.0, 0.5])

    coords = plain.vertices - plain.vertices.mean(axis=0)
    cubed = DrawableMesh(
        plain.vertices, plain.indices, VertexFilling(FillingKind.TEXCOORD_CUBE, coords)
    )
    row = cubed.interleaved_vertices()[7]
    np.testing.assert_array_equal(row[3:6], [1.0, 1.0, 1.0])
    np.testing.assert_array_equal(row[6:], [1.0, 1.0, 1.0])


def test_flat_texcoords_are_padded():
    filling = VertexFilling(FillingKind.TEXCOORD_2D, np.array([[0.25, 0.75]]))
    np.testing.assert_array_equal(filling.texcoord_columns(), [[0.25, 0.75, 0.0]])


def test_draw_map_names_textures():
    texture = TextureData(name="checker")
    box = BoxGenerator().generate()
    textured = DrawableMesh(box.vertices, box.indices, texture=texture)
    collection = MeshCollection([box, textured])
    assert collection.draw_map() == [(36, None), (36, "checker")]


def test_mesh_validation():
    vertices = np.zeros((3, 3))
    with pytest.raises(ValueError, match="out of range"):
        DrawableMesh(vertices, np.array([0, 1, 3]))
    with pytest.raises(ValueError, match="filling"):
        DrawableMesh(vertices, np.array([0, 1, 2]), VertexFilling.solid((1.0, 1.0, 1.0), 2))
    with pytest.raises(ValueError):
        VertexFilling(FillingKind.COLOR, np.zeros((3, 2)))


def test_with_vertices_keeps_filling():
    box = BoxGenerator().generate()
    filled = DrawableMesh(box.vertices, box.indices, VertexFilling.solid((0.0, 1.0, 0.0), 8))
    moved = filled.with_vertices(filled.vertices + 1.0)
    assert moved.filling is filled.filling
    np.testing.assert_array_equal(moved.indices, filled.indices)
    np.testing.assert_allclose(moved.vertices[0], [0.0, 0.0, 0.0])


def test_merge_and_add():
    collection = MeshCollection([BoxGenerator().generate()])
    other = MeshCollection([BoxGenerator().generate(), BoxGenerator().generate()])
    collection.merge(other).add(BoxGenerator().generate())
    assert len(collection) == 4
    assert collection.index_count == 144


def test_to_trimesh():
    collection = MeshCollection([BoxGenerator().generate(), BoxGenerator().generate()])
    mesh = collection.to_trimesh()
    assert len(mesh.vertices) == 16
    assert len(mesh.faces) == 24
    assert mesh.visual.vertex_colors.shape == (16, 4)
