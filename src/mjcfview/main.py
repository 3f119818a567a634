"""Main entry point for mjcfview."""

import argparse
import logging
import sys
from pathlib import Path

from .config import CompilerConfig, load_config
from .core.errors import CompileError
from .core.mesh import MeshCollection
from .core.nodes import NodeKind, SceneNode
from .pipeline.model import SceneModel
from .plugins.base import PluginManager
from .plugins.rubiks import SCRAMBLE, CubeMove, RubiksCubePlugin

EXPORT_SUFFIXES = (".glb", ".obj", ".ply", ".stl")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="mjcfview - compile MuJoCo-style scene documents into render-ready meshes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "document",
        type=Path,
        help="Scene document to compile",
    )
    parser.add_argument(
        "-c", "--config",
        metavar="PATH",
        type=Path,
        help="YAML file with compiler settings",
    )
    parser.add_argument(
        "-e", "--export",
        metavar="PATH",
        type=Path,
        help=f"Export the compiled meshes ({', '.join(EXPORT_SUFFIXES)})",
    )
    parser.add_argument(
        "--rubiks-moves",
        metavar="MOVES",
        help='Cube moves applied before compiling, e.g. "F+ R- U+", or "scramble"',
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log progress (-v) or per-node detail (-vv)",
    )
    return parser.parse_args(argv)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _plugins_for(args: argparse.Namespace) -> PluginManager:
    plugins = PluginManager()
    if args.rubiks_moves:
        if args.rubiks_moves.strip().lower() == "scramble":
            moves = SCRAMBLE
        else:
            moves = CubeMove.parse_sequence(args.rubiks_moves)
        plugins.register(RubiksCubePlugin(moves))
    return plugins


def _describe(node: SceneNode) -> str:
    label = node.tag
    if node.name:
        label += f" {node.name!r}"
    if node.kind is NodeKind.GEOM:
        label += f" ({node.data.geom_type.value})"
    if node.kind.is_classed and node.class_name != "main":
        label += f" [class={node.class_name}]"
    return label


def print_report(model: SceneModel, collection: MeshCollection) -> None:
    """Print the node tree and mesh statistics of a compiled model."""
    tree = model.tree

    print("mjcfview - Scene Compiler")
    print("=" * 40)
    print(f"Document contains {len(tree)} nodes:")
    for root_id in tree.roots.values():
        for node in tree.iter_nodes(root_id):
            indent = "  " * tree.depth(node.id)
            print(f"{indent}- {_describe(node)}")

    textured = sum(1 for _, texture in collection.draw_map() if texture is not None)
    print()
    print(f"Meshes:    {len(collection)} ({textured} textured)")
    print(f"Vertices:  {collection.vertex_count}")
    print(f"Indices:   {collection.index_count}")
    print(f"Textures:  {len(model.textures())} loaded")


def main(argv: list[str] | None = None) -> int:
    """Run the mjcfview command line tool."""
    args = parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = load_config(args.config) if args.config else CompilerConfig()
        plugins = _plugins_for(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        model = SceneModel.from_file(args.document, config=config, plugins=plugins)
        collection = model.compile()
        print_report(model, collection)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except CompileError as e:
        print(f"Compilation failed: {e}", file=sys.stderr)
        return 1

    if args.export:
        if args.export.suffix.lower() not in EXPORT_SUFFIXES:
            print(f"Error: unsupported export format {args.export.suffix!r}", file=sys.stderr)
            return 2
        collection.to_trimesh().export(str(args.export))
        print(f"\nExported meshes to {args.export}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
