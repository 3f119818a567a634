"""Tests for the command line tool."""

import trimesh

from mjcfview.main import main, parse_args

SCENE = """
<mujoco>
  <default>
    <default class="red"><geom rgba="1 0 0 1"/></default>
  </default>
  <worldbody>
    <geom name="floor" type="plane" size="5 5 0.1"/>
    <body name="core" pos="0 0 1">
      <geom name="ball" class="red" type="sphere" size="0.5"/>
    </body>
  </worldbody>
</mujoco>
"""


def write_scene(tmp_path, text=SCENE):
    path = tmp_path / "scene.xml"
    path.write_text(text)
    return path


def test_parse_args(tmp_path):
    args = parse_args([str(tmp_path / "scene.xml"), "-vv", "--rubiks-moves", "F+ R-"])
    assert args.document.name == "scene.xml"
    assert args.verbose == 2
    assert args.rubiks_moves == "F+ R-"
    assert args.export is None


def test_report(tmp_path, capsys):
    assert main([str(write_scene(tmp_path))]) == 0

    out = capsys.readouterr().out
    assert "Document contains 6 nodes" in out
    assert "geom 'ball' (sphere) [class=red]" in out
    assert "Meshes:    2 (0 textured)" in out
    assert "Vertices:  1060" in out


def test_export(tmp_path, capsys):
    export = tmp_path / "scene.ply"
    assert main([str(write_scene(tmp_path)), "--export", str(export)]) == 0

    mesh = trimesh.load(export, process=False)
    assert len(mesh.vertices) == 1060
    assert "Exported meshes" in capsys.readouterr().out


def test_unsupported_export_format(tmp_path, capsys):
    assert main([str(write_scene(tmp_path)), "--export", str(tmp_path / "scene.fbx")]) == 2
    assert "unsupported export format" in capsys.readouterr().err


def test_config_file(tmp_path, capsys):
    config = tmp_path / "settings.yaml"
    config.write_text("sphere_subdivisions: 8\n")
    assert main([str(write_scene(tmp_path)), "--config", str(config)]) == 0
    assert "Vertices:  76" in capsys.readouterr().out


def test_bad_config_file(tmp_path, capsys):
    config = tmp_path / "settings.yaml"
    config.write_text("spheres: 8\n")
    assert main([str(write_scene(tmp_path)), "-c", str(config)]) == 2
    assert "spheres" in capsys.readouterr().err


def test_bad_moves(tmp_path, capsys):
    assert main([str(write_scene(tmp_path)), "--rubiks-moves", "F+ Q-"]) == 2
    assert "Q-" in capsys.readouterr().err


def test_scramble_keyword(tmp_path, capsys):
    assert main([str(write_scene(tmp_path)), "--rubiks-moves", "scramble"]) == 0


def test_missing_document(tmp_path, capsys):
    assert main([str(tmp_path / "nowhere.xml")]) == 1
    assert "not found" in capsys.readouterr().err


def test_compile_failure(tmp_path, capsys):
    path = write_scene(tmp_path, '<worldbody><geom type="mesh" mesh="ghost"/></worldbody>')
    assert main([str(path)]) == 1
    assert "Compilation failed" in capsys.readouterr().err
