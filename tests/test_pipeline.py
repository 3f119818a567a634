"""End-to-end tests: documents compiled into mesh collections."""

import logging
import threading

import numpy as np
import pytest
from PIL import Image

from mjcfview.config import CompilerConfig
from mjcfview.core.errors import AssetResolutionError, CompileError, GeometryError
from mjcfview.core.mesh import FillingKind, MeshCollection
from mjcfview.generators import BoxGenerator
from mjcfview.pipeline import STAGES, RenderState, SceneModel

PYRAMID_OBJ = """\
v -1 -1 0
v 1 -1 0
v 1 1 0
v -1 1 0
v 0 0 0
v 0 0 1
f 1 2 6
f 2 3 6
f 3 4 6
f 4 1 6
f 2 1 5
f 3 2 5
f 4 3 5
f 1 4 5
"""

PYRAMID_POINTS = "-1 -1 0  1 -1 0  1 1 0  -1 1 0  0 0 0  0 0 1"


def save_grid_image(path, rows=3, cols=4, cell=2):
    pixels = np.zeros((rows * cell, cols * cell, 3), dtype=np.uint8)
    for row in range(rows):
        for col in range(cols):
            pixels[row * cell:(row + 1) * cell, col * cell:(col + 1) * cell] = row * cols + col
    Image.fromarray(pixels).save(path)


def test_body_position_moves_geom():
    """A box inside a body at x=1 has its first corner at (0, -1, -1)."""
    model = SceneModel.from_string("""
    <mujoco>
      <worldbody>
        <body pos="1 0 0">
          <geom type="box" size="1 1 1" pos="0 0 0"/>
        </body>
      </worldbody>
    </mujoco>
    """)
    collection = model.compile()

    assert len(collection) == 1
    np.testing.assert_allclose(collection.meshes[0].vertices[0], [0.0, -1.0, -1.0])
    np.testing.assert_allclose(collection.interleaved_vertices()[0, :3], [0.0, -1.0, -1.0])


def test_nested_bodies_compose():
    model = SceneModel.from_string("""
    <worldbody>
      <body pos="0 0 1">
        <body pos="0 0 1" euler="0 0 90">
          <geom type="box" size="1 1 1"/>
        </body>
      </body>
    </worldbody>
    """)
    vertices = model.compile().meshes[0].vertices
    # (-1, -1, -1) turned a quarter about Z, then lifted twice
    np.testing.assert_allclose(vertices[0], [-1.0, 1.0, 1.0], atol=1e-12)


def test_geom_position_offsets_primitive_and_transform():
    """Primitives are built around the geom position, then moved by it again."""
    model = SceneModel.from_string(
        '<worldbody><geom type="box" size="1 1 1" pos="1 0 0"/></worldbody>'
    )
    np.testing.assert_allclose(model.compile().meshes[0].vertices[0], [1.0, -1.0, -1.0])


def test_default_class_selects_material():
    """Only geoms of the matching class pick up the class material."""
    model = SceneModel.from_string("""
    <mujoco>
      <default>
        <default class="red"><geom material="redmat"/></default>
      </default>
      <asset><material name="redmat" rgba="1 0 0 1"/></asset>
      <worldbody>
        <geom name="a" class="red" type="box" size="1 1 1"/>
        <geom name="b" class="main" type="box" size="1 1 1"/>
        <geom name="c" type="box" size="1 1 1"/>
      </worldbody>
    </mujoco>
    """)
    red, main, unset = model.compile().meshes

    assert red.filling.kind is FillingKind.COLOR
    np.testing.assert_array_equal(red.filling.values[0], [1.0, 0.0, 0.0])
    assert main.filling is None
    assert unset.filling is None
    assert model.tree.find("b").data.material_id is None


def test_imported_mesh_keeps_file_faces(tmp_path):
    """File meshes pass through as written; inline point lists are hulled."""
    (tmp_path / "pyramid.obj").write_text(PYRAMID_OBJ)
    document = tmp_path / "scene.xml"
    document.write_text(f"""
    <mujoco>
      <asset>
        <mesh name="from_file" file="pyramid.obj"/>
        <mesh name="inline" vertex="{PYRAMID_POINTS}"/>
      </asset>
      <worldbody>
        <geom type="mesh" mesh="from_file"/>
        <geom type="mesh" mesh="inline"/>
      </worldbody>
    </mujoco>
    """)

    imported, hulled = SceneModel.from_file(document).compile().meshes

    points = np.array(PYRAMID_POINTS.split(), dtype=np.float64).reshape(-1, 3)
    faces = np.array(
        [line.split()[1:] for line in PYRAMID_OBJ.splitlines() if line.startswith("f")],
        dtype=np.int64,
    ) - 1
    assert imported.index_count == 24
    np.testing.assert_allclose(
        imported.vertices[imported.indices].reshape(-1, 3, 3), points[faces]
    )

    assert hulled.index_count != imported.index_count
    assert hulled.index_count % 3 == 0
    assert len(np.unique(hulled.vertices, axis=0)) <= len(points)


def test_mesh_scale_applies_to_asset_geometry():
    model = SceneModel.from_string("""
    <mujoco>
      <asset><mesh name="tet" vertex="0 0 0 1 0 0 0 1 0 0 0 1" scale="2 2 2"/></asset>
      <worldbody><geom type="mesh" mesh="tet"/></worldbody>
    </mujoco>
    """)
    vertices = model.compile().meshes[0].vertices
    np.testing.assert_allclose(vertices.max(axis=0), [2.0, 2.0, 2.0])


def test_fillings_and_textures(tmp_path):
    """Materials decide each mesh's filling and texture."""
    save_grid_image(tmp_path / "dice.png")
    Image.new("RGB", (4, 4), (10, 20, 30)).save(tmp_path / "flat.png")
    document = tmp_path / "scene.xml"
    document.write_text("""
    <mujoco>
      <asset>
        <texture name="dice" type="cube" file="dice.png" gridsize="3 4" gridlayout=".U..LFRB.D.."/>
        <texture name="flat" type="2d" file="flat.png"/>
        <material name="dice"/>
        <material name="floor" texture="flat"/>
        <material name="red" rgba="1 0 0 1"/>
      </asset>
      <worldbody>
        <geom type="box" size="1 1 1" material="dice"/>
        <geom type="plane" size="5 5 0.1" material="floor"/>
        <geom type="sphere" size="0.5" material="red"/>
        <geom type="box" size="1 1 1" rgba="0 0 1 1"/>
        <geom type="box" size="1 1 1"/>
      </worldbody>
    </mujoco>
    """)

    model = SceneModel.from_file(document)
    collection = model.compile()
    dice, floor, ball, blue, plain = collection.meshes

    assert collection.draw_map() == [(36, "dice"), (6, "flat"), (6144, None), (36, None), (36, None)]

    assert dice.filling.kind is FillingKind.TEXCOORD_CUBE
    np.testing.assert_allclose(dice.filling.values.mean(axis=0), 0.0, atol=1e-12)
    assert floor.filling is None
    assert floor.texture.asset_name == "flat"
    np.testing.assert_array_equal(ball.filling.values[0], [1.0, 0.0, 0.0])
    np.testing.assert_array_equal(blue.filling.values[0], [0.0, 0.0, 1.0])
    assert plain.filling is None

    textures = model.textures()
    assert [texture.asset_name for texture in textures] == ["dice", "flat"]
    assert textures[0].dimensions == (8, 6)
    assert textures[0].cube_face("D") == bytes([9]) * 12


def test_asset_dir_from_config(tmp_path):
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "pyramid.obj").write_text(PYRAMID_OBJ)
    document = tmp_path / "scene.xml"
    document.write_text("""
    <mujoco>
      <asset><mesh file="pyramid.obj"/></asset>
      <worldbody><geom type="mesh" mesh="pyramid"/></worldbody>
    </mujoco>
    """)

    model = SceneModel.from_file(document, config=CompilerConfig(asset_dir="assets"))
    assert model.compile().index_count == 24


def test_missing_asset_file_raises(tmp_path):
    document = tmp_path / "scene.xml"
    document.write_text("""
    <mujoco>
      <asset><texture name="t" file="missing.png"/><material name="t"/></asset>
      <worldbody><geom type="box" material="t"/></worldbody>
    </mujoco>
    """)
    with pytest.raises(AssetResolutionError, match="missing.png"):
        SceneModel.from_file(document)


def test_missing_document_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        SceneModel.from_file(tmp_path / "nowhere.xml")


def test_unknown_mesh_is_a_compile_error():
    with pytest.raises(CompileError):
        SceneModel.from_string('<worldbody><geom type="mesh" mesh="ghost"/></worldbody>')


def test_flat_inline_mesh_fails_at_compile():
    model = SceneModel.from_string("""
    <mujoco>
      <asset><mesh name="flat" vertex="0 0 0 1 0 0 0 1 0 1 1 0"/></asset>
      <worldbody><geom type="mesh" mesh="flat"/></worldbody>
    </mujoco>
    """)
    with pytest.raises(GeometryError):
        model.compile()


def test_stages_run_in_order(caplog):
    with caplog.at_level(logging.INFO, logger="mjcfview"):
        model = SceneModel.from_string('<worldbody><geom type="box"/></worldbody>')

    assert model.completed == list(STAGES)
    assert model.is_loaded
    assert "Built scene tree with 2 nodes" in caplog.text


def test_compile_requires_load():
    with pytest.raises(CompileError, match="loaded"):
        SceneModel().compile()


def test_load_only_once():
    model = SceneModel.from_string("<worldbody/>")
    with pytest.raises(CompileError):
        model.load([])


def test_recompile_sees_extra_rotations():
    """Compiling only reads the tree, so appended rotations show up on recompile."""
    model = SceneModel.from_string(
        '<worldbody><body name="b"><geom type="box" size="2 1 1"/></body></worldbody>'
    )
    before = model.compile().meshes[0].vertices

    model.tree.find("b").data.transform.add_rotation((0.0, 0.0, 90.0))
    after = model.compile().meshes[0].vertices

    np.testing.assert_allclose(before[0], [-2.0, -1.0, -1.0])
    np.testing.assert_allclose(after[0], [-1.0, 2.0, -1.0], atol=1e-12)


def test_document_without_worldbody_is_empty():
    model = SceneModel.from_string('<mujoco><asset><material name="m"/></asset></mujoco>')
    collection = model.compile()
    assert len(collection) == 0
    assert collection.interleaved_vertices().shape == (0, 9)


def test_geometry_free_geoms_are_skipped(caplog):
    with caplog.at_level(logging.WARNING):
        model = SceneModel.from_string(
            '<worldbody><geom type="hfield"/><geom type="box"/></worldbody>'
        )
        collection = model.compile()

    assert collection.draw_map() == [(36, None)]
    assert "hfield" in caplog.text


def test_geom_without_type_is_a_box():
    model = SceneModel.from_string('<worldbody><geom size="1 1 1"/></worldbody>')
    (mesh,) = model.compile().meshes
    assert (mesh.vertex_count, mesh.index_count) == (8, 36)


def test_fallback_tint_from_config():
    """Meshes with no filling take the configured tint in the compiled buffer."""
    config = CompilerConfig(fallback_tint=(0.0, 0.25, 1.0))
    model = SceneModel.from_string('<worldbody><geom type="box"/></worldbody>', config=config)

    state = RenderState()
    model.publish(state)
    rows = state.current().meshes.interleaved_vertices()
    np.testing.assert_allclose(rows[:, 3:6], np.tile([0.0, 0.25, 1.0], (8, 1)))


def test_subdivisions_from_config():
    config = CompilerConfig(sphere_subdivisions=8, cylinder_segments=6)
    model = SceneModel.from_string(
        '<worldbody><geom type="sphere" size="1"/><geom type="cylinder" size="1 1"/></worldbody>',
        config=config,
    )
    sphere, cylinder = model.compile().meshes
    assert sphere.vertex_count == 9 * 8
    assert cylinder.vertex_count == 2 * 6 + 2


# ----------------------------------------------------------------------------
# Render handoff
# ----------------------------------------------------------------------------


def test_publish_and_take():
    model = SceneModel.from_string('<worldbody><geom type="box"/></worldbody>')
    state = RenderState()
    assert state.current() is None

    collection = model.publish(state)
    snapshot = state.current()
    assert snapshot.meshes is collection
    assert snapshot.generation == 1
    assert state.generation == 1

    assert state.take() is snapshot
    assert state.take() is None
    assert state.generation == 1


def test_readers_never_see_partial_scenes():
    """Each snapshot a reader sees is one whole published scene."""
    box = BoxGenerator().generate()
    state = RenderState()
    seen = []
    done = threading.Event()

    def read():
        while not done.is_set():
            snapshot = state.current()
            if snapshot is not None:
                seen.append((snapshot.generation, len(snapshot.meshes)))

    readers = [threading.Thread(target=read) for _ in range(3)]
    for reader in readers:
        reader.start()
    for count in range(1, 51):
        state.publish(MeshCollection([box] * count))
    done.set()
    for reader in readers:
        reader.join()

    assert state.generation == 50
    assert all(generation == count for generation, count in seen)
